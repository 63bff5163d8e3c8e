# le_dashboard/routes/job_items.py
from flask import Blueprint, request, jsonify
from flask_login import login_required
from le_dashboard.services.storage import storage
from le_dashboard.services.errors import NotFoundError, ValidationError
import logging

job_items_bp = Blueprint('job_items', __name__)
logger = logging.getLogger(__name__)

@job_items_bp.route('/bulk', methods=['POST'])
@login_required
def bulk_save_job_items():
    """Replace every item of a job with the submitted list"""
    data = request.get_json(silent=True) or {}
    job_id = data.get('jobId')
    items = data.get('items')

    if not job_id or not isinstance(items, list):
        return jsonify({'error': 'Invalid request data'}), 400

    try:
        saved = storage.replace_job_items(int(job_id), items)
        return jsonify([item.to_dict() for item in saved])
    except (TypeError, ValueError):
        return jsonify({'error': 'Invalid request data'}), 400
    except NotFoundError:
        return jsonify({'error': 'Job not found'}), 404
    except ValidationError as e:
        return jsonify({'error': 'Failed to save job items', 'details': e.to_dict()}), 400
    except Exception as e:
        logger.error(f"Error bulk saving job items for job {job_id}: {str(e)}")
        return jsonify({'error': 'Failed to save job items'}), 500

@job_items_bp.route('/<int:job_id>', methods=['GET'])
@login_required
def get_items_for_job(job_id):
    """Get job items by job ID (alternative to /api/jobs/<id>/items)"""
    try:
        return jsonify([item.to_dict() for item in storage.get_job_items(job_id)])
    except Exception as e:
        logger.error(f"Error fetching job items for job {job_id}: {str(e)}")
        return jsonify({'error': 'Failed to fetch job items'}), 500

@job_items_bp.route('/<int:item_id>', methods=['PUT'])
@login_required
def update_job_item(item_id):
    """Update a job item"""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'Request body must be a JSON object'}), 400

    try:
        item = storage.update_job_item(item_id, data)
        return jsonify(item.to_dict())
    except NotFoundError:
        return jsonify({'error': 'Job item not found'}), 404
    except ValidationError as e:
        return jsonify({'error': 'Failed to update job item', 'details': e.to_dict()}), 400
    except Exception as e:
        logger.error(f"Error updating job item {item_id}: {str(e)}")
        return jsonify({'error': 'Failed to update job item'}), 500

@job_items_bp.route('/<int:item_id>', methods=['DELETE'])
@login_required
def delete_job_item(item_id):
    """Delete a job item"""
    try:
        storage.delete_job_item(item_id)
        return '', 204
    except NotFoundError:
        return jsonify({'error': 'Job item not found'}), 404
    except Exception as e:
        logger.error(f"Error deleting job item {item_id}: {str(e)}")
        return jsonify({'error': 'Failed to delete job item'}), 500
