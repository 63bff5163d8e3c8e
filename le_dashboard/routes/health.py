from datetime import datetime

from flask import Blueprint, jsonify, current_app
from sqlalchemy import text

from le_dashboard import __version__
from le_dashboard.models import db
from le_dashboard.services.job_numbering import peek_job_number

health_bp = Blueprint('health', __name__)

CRITICAL_BLUEPRINTS = ['auth', 'clients', 'jobs']

@health_bp.route('/health', methods=['GET'])
def health_check():
    """
    Health check endpoint to verify service status
    Tests database connectivity, the job counter, and registered blueprints
    """
    health_status = {
        'status': 'healthy',
        'app': 'LE Dashboard API',
        'version': __version__,
        'timestamp': datetime.utcnow().isoformat() + 'Z',
        'checks': {}
    }
    overall_healthy = True

    # Test 1: Database Connection
    try:
        db.session.execute(text('SELECT 1'))
        db.session.commit()

        db_url = current_app.config.get('SQLALCHEMY_DATABASE_URI', '')
        if 'sqlite' in db_url.lower():
            db_type = 'SQLite'
        elif 'postgresql' in db_url.lower():
            db_type = 'PostgreSQL'
        else:
            db_type = 'Unknown'

        health_status['checks']['database'] = {
            'status': 'healthy',
            'type': db_type,
            'connected': True
        }
    except Exception as db_error:
        db.session.rollback()
        current_app.logger.error(f"Database health check failed: {db_error}")
        health_status['checks']['database'] = {
            'status': 'unhealthy',
            'connected': False,
            'error': str(db_error)
        }
        overall_healthy = False

    # Test 2: Job counter
    try:
        health_status['checks']['job_counter'] = {
            'status': 'healthy',
            'lastJobNumber': peek_job_number()
        }
    except Exception as counter_error:
        db.session.rollback()
        current_app.logger.error(f"Job counter health check failed: {counter_error}")
        health_status['checks']['job_counter'] = {
            'status': 'unhealthy',
            'error': str(counter_error)
        }
        overall_healthy = False

    # Test 3: Application State
    registered_blueprints = list(current_app.blueprints.keys())
    missing_blueprints = [bp for bp in CRITICAL_BLUEPRINTS if bp not in registered_blueprints]
    health_status['checks']['application'] = {
        'status': 'healthy' if not missing_blueprints else 'warning',
        'blueprints': {
            'registered': registered_blueprints,
            'missing_critical': missing_blueprints
        },
        'routes': {
            'total': len(list(current_app.url_map.iter_rules())),
            'api_routes': len([rule for rule in current_app.url_map.iter_rules()
                               if rule.rule.startswith('/api/')])
        }
    }
    if missing_blueprints:
        current_app.logger.warning(f"Missing critical blueprints: {missing_blueprints}")

    status_code = 200
    if not overall_healthy:
        health_status['status'] = 'unhealthy'
        status_code = 503
    elif any(check.get('status') == 'warning' for check in health_status['checks'].values()):
        health_status['status'] = 'degraded'

    return jsonify(health_status), status_code

@health_bp.route('/health/simple', methods=['GET'])
def simple_health_check():
    """
    Simple health check for basic monitoring
    Returns minimal response for load balancers
    """
    try:
        db.session.execute(text('SELECT 1'))
        db.session.commit()
        return jsonify({
            'status': 'healthy',
            'message': 'Service is running'
        }), 200
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Simple health check failed: {e}")
        return jsonify({
            'status': 'unhealthy',
            'message': 'Database connection failed'
        }), 503
