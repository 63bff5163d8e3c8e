import os
import logging
import click
from flask import Flask, request, jsonify
from flask_login import LoginManager
from flask_cors import CORS

from le_dashboard import __version__
from le_dashboard.config import config, get_config_name
from le_dashboard.models import db, User
from le_dashboard.routes import BLUEPRINTS
from le_dashboard.services.job_numbering import ensure_job_counter

def create_app(config_name=None, test_config=None):
    """
    Application factory

    ``test_config`` overrides individual settings after the configuration
    class is loaded (tests use it to point at a temporary database).
    """
    # Auto-detect environment if not specified
    if config_name is None:
        config_name = get_config_name()

    app = Flask(__name__)

    config_class = config[config_name]
    app.config.from_object(config_class())
    if test_config:
        app.config.update(test_config)

    configure_logging(app, config_name)
    app.logger.info(f"Configuration loaded for {config_name} environment")

    db_uri = app.config.get('SQLALCHEMY_DATABASE_URI', '')
    if 'sqlite' in db_uri.lower():
        app.logger.info("Using SQLite database")
    elif 'postgresql' in db_uri.lower():
        app.logger.info("Using PostgreSQL database")

    # Relative SQLite paths resolve inside the instance folder
    os.makedirs(app.instance_path, exist_ok=True)

    db.init_app(app)

    CORS(app,
         origins=app.config.get('CORS_ORIGINS', []),
         supports_credentials=app.config.get('CORS_SUPPORTS_CREDENTIALS', True),
         methods=['GET', 'POST', 'PUT', 'PATCH', 'DELETE', 'OPTIONS'],
         allow_headers=['Content-Type', 'Authorization', 'X-Requested-With', 'Accept', 'Origin'],
         max_age=86400
    )

    # Flask-Login with JSON responses for API endpoints (no redirects)
    login_manager = LoginManager()
    login_manager.init_app(app)
    login_manager.session_protection = 'strong'

    @login_manager.unauthorized_handler
    def handle_unauthorized():
        """Return JSON instead of redirecting to a login page"""
        app.logger.warning(f"Unauthorized API access attempt to {request.path} from {request.remote_addr}")
        return jsonify({
            'error': 'Authentication required',
            'message': 'You must be logged in to access this endpoint',
            'code': 'UNAUTHORIZED'
        }), 401

    @login_manager.user_loader
    def load_user(user_id):
        try:
            return db.session.get(User, int(user_id))
        except (ValueError, TypeError) as e:
            app.logger.warning(f"Invalid user_id provided to user_loader: {user_id} - {e}")
            return None

    for blueprint, url_prefix in BLUEPRINTS:
        app.register_blueprint(blueprint, url_prefix=url_prefix)
        app.logger.debug(f"Registered {blueprint.name} blueprint at {url_prefix}")

    @app.route('/')
    def index():
        """API information"""
        return jsonify({
            'message': 'LE Dashboard API',
            'status': 'running',
            'version': __version__,
            'environment': config_name,
            'endpoints': {
                'health': '/api/health',
                'routes': '/api/routes',
                'auth': '/api/auth',
                'users': '/api/users',
                'admin': '/api/admin',
                'clients': '/api/clients',
                'jobs': '/api/jobs',
                'job_items': '/api/job-items',
                'analytics': '/api/analytics'
            }
        })

    @app.route('/api/routes')
    def list_routes():
        """Listing of the API routes"""
        routes = []
        for rule in app.url_map.iter_rules():
            if not rule.rule.startswith('/api/'):
                continue
            view = app.view_functions[rule.endpoint]
            description = (view.__doc__ or '').strip().splitlines()
            routes.append({
                'path': rule.rule,
                'methods': sorted(rule.methods - {'HEAD', 'OPTIONS'}),
                'description': description[0].strip() if description else ''
            })
        routes.sort(key=lambda route: route['path'])
        return jsonify({'routes': routes, 'total': len(routes)})

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({
            'error': 'Not Found',
            'message': f'The requested endpoint {request.path} does not exist',
            'code': 'NOT_FOUND'
        }), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({
            'error': 'Method Not Allowed',
            'message': f'The method {request.method} is not allowed for endpoint {request.path}',
            'code': 'METHOD_NOT_ALLOWED'
        }), 405

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        app.logger.error(f"Internal server error: {error}")
        return jsonify({
            'error': 'Internal Server Error',
            'message': 'An unexpected error occurred. Please try again later.',
            'code': 'INTERNAL_ERROR'
        }), 500

    @app.cli.command('init-db')
    def init_db_command():
        """Create tables, the job counter row and the default admin user."""
        db.create_all()
        ensure_job_counter()

        username = app.config.get('DEFAULT_ADMIN_USERNAME')
        password = app.config.get('DEFAULT_ADMIN_PASSWORD')
        if not password:
            click.echo("DEFAULT_ADMIN_PASSWORD not set; no admin user created")
        elif User.query.filter_by(username=username).first():
            click.echo(f"Admin user '{username}' already exists")
        else:
            admin = User(username=username, role='Admin', first_name='System', last_name='Administrator')
            admin.set_password(password)
            db.session.add(admin)
            db.session.commit()
            click.echo(f"Created admin user '{username}'")
        click.echo("Database initialised")

    with app.app_context():
        db.create_all()
        ensure_job_counter()
        app.logger.info("Database tables created/verified successfully")

    total_routes = len(list(app.url_map.iter_rules()))
    app.logger.info(f"LE Dashboard API created ({config_name}, {total_routes} routes)")

    return app

def configure_logging(app, config_name):
    """Root logging level from LOG_LEVEL; production gets a formatted stream handler"""
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    logging.basicConfig(level=level)
    logging.getLogger().setLevel(level)
    app.logger.setLevel(level)

    if config_name == 'production' and not app.debug:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        app.logger.addHandler(handler)

if __name__ == '__main__':
    # For local development - auto-detect environment
    local_app = create_app()
    port = int(os.environ.get('PORT', 5000))
    local_app.run(
        debug=local_app.config.get('DEBUG', False),
        host='0.0.0.0',
        port=port
    )
