# le_dashboard/routes/analytics.py
from flask import Blueprint, jsonify
from flask_login import login_required
from le_dashboard.services.analytics import get_performance_summary, get_overview_summary
import logging

analytics_bp = Blueprint('analytics', __name__)
logger = logging.getLogger(__name__)

@analytics_bp.route('/performance', methods=['GET'])
@login_required
def performance():
    """Job, department and client performance figures"""
    try:
        return jsonify(get_performance_summary())
    except Exception as e:
        logger.error(f"Error computing performance analytics: {str(e)}")
        return jsonify({'error': 'Failed to compute performance analytics'}), 500

@analytics_bp.route('/overview', methods=['GET'])
@login_required
def overview():
    """Live jobs and invoicing backlog for the home dashboard"""
    try:
        return jsonify(get_overview_summary())
    except Exception as e:
        logger.error(f"Error computing dashboard overview: {str(e)}")
        return jsonify({'error': 'Failed to compute dashboard overview'}), 500
