# le_dashboard/routes/auth.py
from flask import Blueprint, request, jsonify
from flask_login import login_user, logout_user, login_required, current_user
from le_dashboard.services.storage import storage
from sqlalchemy.exc import SQLAlchemyError
import logging

auth_bp = Blueprint('auth', __name__)
logger = logging.getLogger(__name__)

@auth_bp.route('/login', methods=['POST'])
def login():
    """Log in with username and password"""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'No data provided'}), 400

    username = (data.get('username') or '').strip()
    password = data.get('password') or ''

    if not username or not password:
        logger.warning("Login validation failed: missing username or password")
        return jsonify({'error': 'Username and password are required'}), 400

    user = storage.get_user_by_username(username)
    if not user or not user.check_password(password):
        logger.warning(f"Login failed for username '{username}'")
        return jsonify({'error': 'Invalid username or password'}), 401

    if not user.is_active:
        logger.warning(f"Login failed: user '{username}' is inactive")
        return jsonify({'error': 'Account is disabled'}), 401

    try:
        storage.record_login(user)
    except SQLAlchemyError as e:
        # Don't fail login for this error
        logger.error(f"Database error updating last login: {str(e)}")

    login_user(user, remember=True)
    logger.info(f"Login successful for user '{username}' (ID: {user.id})")

    return jsonify({
        'message': 'Login successful',
        'user': user.to_dict()
    })

@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    """End the current session"""
    username = current_user.username
    logout_user()
    logger.info(f"User '{username}' logged out")
    return jsonify({'message': 'Logout successful'})

@auth_bp.route('/me', methods=['GET'])
@login_required
def get_current_user():
    """Get the logged-in user"""
    return jsonify({'user': current_user.to_dict()})

@auth_bp.route('/change-password', methods=['POST'])
@login_required
def change_password():
    """Change the logged-in user's password"""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'No data provided'}), 400

    current_password = data.get('currentPassword') or ''
    new_password = data.get('newPassword') or ''

    if not current_password or not new_password:
        return jsonify({'error': 'Current password and new password are required'}), 400

    if len(new_password) < 6:
        return jsonify({'error': 'New password must be at least 6 characters long'}), 400

    if not current_user.check_password(current_password):
        logger.warning(f"Password change failed: incorrect current password for user {current_user.username}")
        return jsonify({'error': 'Current password is incorrect'}), 401

    try:
        storage.update_user(current_user.id, {'password': new_password})
    except SQLAlchemyError as e:
        logger.error(f"Error updating password: {str(e)}")
        return jsonify({'error': 'Failed to change password'}), 500

    logger.info(f"Password changed successfully for user {current_user.username}")
    return jsonify({'message': 'Password changed successfully'})
