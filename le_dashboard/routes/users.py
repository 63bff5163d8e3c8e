# le_dashboard/routes/users.py
from flask import Blueprint, request, jsonify
from flask_login import login_required, current_user
from le_dashboard.middleware.auth import admin_required
from le_dashboard.services.storage import storage
from le_dashboard.services.errors import NotFoundError, ValidationError
import logging

users_bp = Blueprint('users', __name__)
logger = logging.getLogger(__name__)

# User.to_dict() never includes the password hash.

@users_bp.route('', methods=['GET'])
@login_required
@admin_required
def get_users():
    """Get all users"""
    try:
        return jsonify([user.to_dict() for user in storage.get_all_users()])
    except Exception as e:
        logger.error(f"Error fetching users: {str(e)}")
        return jsonify({'error': 'Failed to fetch users'}), 500

@users_bp.route('/<int:user_id>', methods=['GET'])
@login_required
@admin_required
def get_user(user_id):
    """Get user by ID"""
    try:
        return jsonify(storage.get_user(user_id).to_dict())
    except NotFoundError:
        return jsonify({'error': 'User not found'}), 404
    except Exception as e:
        logger.error(f"Error fetching user {user_id}: {str(e)}")
        return jsonify({'error': 'Failed to fetch user'}), 500

@users_bp.route('', methods=['POST'])
@login_required
@admin_required
def create_user():
    """Create new user"""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'Failed to create user', 'details': {'message': 'Request body must be a JSON object'}}), 400

    try:
        user = storage.create_user(data)
        logger.info(f"User '{user.username}' created by {current_user.username}")
        return jsonify(user.to_dict()), 201
    except ValidationError as e:
        return jsonify({'error': 'Failed to create user', 'details': e.to_dict()}), 400
    except Exception as e:
        logger.error(f"Error creating user: {str(e)}")
        return jsonify({'error': 'Failed to create user'}), 500

@users_bp.route('/<int:user_id>', methods=['PUT'])
@login_required
@admin_required
def update_user(user_id):
    """Update user"""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'Request body must be a JSON object'}), 400

    try:
        return jsonify(storage.update_user(user_id, data).to_dict())
    except NotFoundError:
        return jsonify({'error': 'User not found'}), 404
    except ValidationError as e:
        return jsonify({'error': 'Failed to update user', 'details': e.to_dict()}), 400
    except Exception as e:
        logger.error(f"Error updating user {user_id}: {str(e)}")
        return jsonify({'error': 'Failed to update user'}), 500

@users_bp.route('/<int:user_id>', methods=['DELETE'])
@login_required
@admin_required
def delete_user(user_id):
    """Delete user"""
    if user_id == current_user.id:
        return jsonify({'error': 'You cannot delete your own account'}), 400

    try:
        storage.delete_user(user_id)
        return '', 204
    except NotFoundError:
        return jsonify({'error': 'User not found'}), 404
    except Exception as e:
        logger.error(f"Error deleting user {user_id}: {str(e)}")
        return jsonify({'error': 'Failed to delete user'}), 500
