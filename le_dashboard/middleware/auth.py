# le_dashboard/middleware/auth.py

from functools import wraps
from flask import jsonify, request
from flask_login import current_user
import logging

logger = logging.getLogger(__name__)

def admin_required(f):
    """
    Decorator to ensure a user is logged in and has the 'Admin' role.
    This must be placed AFTER the @login_required decorator.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            logger.warning(f"Unauthenticated access attempt to admin route: {request.endpoint}")
            return jsonify({'error': 'Authentication required'}), 401

        if not current_user.is_admin:
            logger.warning(f"User '{current_user.username}' (role: {current_user.role}) attempted to access admin route: {request.endpoint}")
            return jsonify({'error': 'Admin access required'}), 403

        return f(*args, **kwargs)
    return decorated_function
