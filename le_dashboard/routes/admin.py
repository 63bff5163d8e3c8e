# le_dashboard/routes/admin.py
from flask import Blueprint, request, jsonify
from flask_login import login_required, current_user
from le_dashboard.middleware.auth import admin_required
from le_dashboard.services.storage import storage
from le_dashboard.services.errors import NotFoundError, ValidationError
from le_dashboard.services.job_numbering import Department, format_job_code, peek_job_number
import logging

admin_bp = Blueprint('admin', __name__)
logger = logging.getLogger(__name__)

@admin_bp.route('/settings', methods=['GET'])
@login_required
@admin_required
def get_settings():
    """Get all admin settings"""
    try:
        return jsonify([setting.to_dict() for setting in storage.get_all_admin_settings()])
    except Exception as e:
        logger.error(f"Error fetching admin settings: {str(e)}")
        return jsonify({'error': 'Failed to fetch admin settings'}), 500

@admin_bp.route('/settings/<string:key>', methods=['GET'])
@login_required
@admin_required
def get_setting(key):
    """Get admin setting by key"""
    try:
        return jsonify(storage.get_admin_setting(key).to_dict())
    except NotFoundError:
        return jsonify({'error': 'Admin setting not found'}), 404
    except Exception as e:
        logger.error(f"Error fetching admin setting '{key}': {str(e)}")
        return jsonify({'error': 'Failed to fetch admin setting'}), 500

@admin_bp.route('/settings', methods=['POST'])
@login_required
@admin_required
def create_setting():
    """Create new admin setting"""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'Failed to create admin setting', 'details': {'message': 'Request body must be a JSON object'}}), 400

    data.setdefault('updatedBy', current_user.username)
    try:
        setting = storage.create_admin_setting(data)
        return jsonify(setting.to_dict()), 201
    except ValidationError as e:
        return jsonify({'error': 'Failed to create admin setting', 'details': e.to_dict()}), 400
    except Exception as e:
        logger.error(f"Error creating admin setting: {str(e)}")
        return jsonify({'error': 'Failed to create admin setting'}), 500

@admin_bp.route('/settings/<string:key>', methods=['PUT'])
@login_required
@admin_required
def update_setting(key):
    """Update admin setting"""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'Request body must be a JSON object'}), 400

    data.setdefault('updatedBy', current_user.username)
    try:
        setting = storage.update_admin_setting(key, data)
        logger.info(f"Admin setting '{key}' updated by {current_user.username}")
        return jsonify(setting.to_dict())
    except NotFoundError:
        return jsonify({'error': 'Admin setting not found'}), 404
    except ValidationError as e:
        return jsonify({'error': 'Failed to update admin setting', 'details': e.to_dict()}), 400
    except Exception as e:
        logger.error(f"Error updating admin setting '{key}': {str(e)}")
        return jsonify({'error': 'Failed to update admin setting'}), 500

@admin_bp.route('/settings/<string:key>', methods=['DELETE'])
@login_required
@admin_required
def delete_setting(key):
    """Delete admin setting"""
    try:
        storage.delete_admin_setting(key)
        return '', 204
    except NotFoundError:
        return jsonify({'error': 'Admin setting not found'}), 404
    except Exception as e:
        logger.error(f"Error deleting admin setting '{key}': {str(e)}")
        return jsonify({'error': 'Failed to delete admin setting'}), 500

@admin_bp.route('/job-counter', methods=['GET'])
@login_required
@admin_required
def get_job_counter():
    """Current job counter value and a preview of the next code per department"""
    try:
        last_job_number = peek_job_number()
        next_number = last_job_number + 1
        return jsonify({
            'lastJobNumber': last_job_number,
            'nextJobNumber': next_number,
            'nextJobCodes': {
                department.value: format_job_code(next_number, department)
                for department in Department
            }
        })
    except Exception as e:
        logger.error(f"Error reading job counter: {str(e)}")
        return jsonify({'error': 'Failed to read job counter'}), 500
