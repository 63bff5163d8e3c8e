# le_dashboard/routes/jobs.py
from flask import Blueprint, request, jsonify
from flask_login import login_required
from le_dashboard.services.storage import storage
from le_dashboard.services.errors import NotFoundError, ValidationError
import logging

jobs_bp = Blueprint('jobs', __name__)
logger = logging.getLogger(__name__)

@jobs_bp.route('', methods=['GET'])
@login_required
def get_jobs():
    """Get all jobs with optional department/status/search filtering"""
    try:
        jobs = storage.get_all_jobs(
            department=request.args.get('department'),
            status=request.args.get('status'),
            search=request.args.get('search', ''),
            client_id=request.args.get('clientId', type=int),
        )
        return jsonify([job.to_dict() for job in jobs])
    except Exception as e:
        logger.error(f"Error retrieving jobs: {str(e)}")
        return jsonify({'error': 'Failed to fetch jobs'}), 500

@jobs_bp.route('/<int:job_id>', methods=['GET'])
@login_required
def get_job(job_id):
    """Get a job by ID"""
    try:
        return jsonify(storage.get_job(job_id).to_dict())
    except NotFoundError:
        return jsonify({'error': 'Job not found'}), 404
    except Exception as e:
        logger.error(f"Error retrieving job {job_id}: {str(e)}")
        return jsonify({'error': 'Failed to fetch job'}), 500

@jobs_bp.route('', methods=['POST'])
@login_required
def create_job():
    """Create a job; the job number and job code are allocated server-side"""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'Failed to create job', 'details': {'message': 'Request body must be a JSON object'}}), 400

    try:
        job = storage.create_job(data)
        return jsonify(job.to_dict()), 201
    except ValidationError as e:
        logger.warning(f"Rejected job payload: {e.message}")
        return jsonify({'error': 'Failed to create job', 'details': e.to_dict()}), 400
    except Exception as e:
        # Covers AllocationPersistenceError; the transaction was rolled back
        logger.error(f"Error creating job: {str(e)}", exc_info=True)
        return jsonify({'error': 'Failed to create job'}), 500

@jobs_bp.route('/<int:job_id>', methods=['PUT', 'PATCH'])
@login_required
def update_job(job_id):
    """Update a job (jobNumber and jobLes are never changed)"""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'Request body must be a JSON object'}), 400

    try:
        job = storage.update_job(job_id, data)
        return jsonify(job.to_dict())
    except NotFoundError:
        return jsonify({'error': 'Job not found'}), 404
    except ValidationError as e:
        return jsonify({'error': 'Failed to update job', 'details': e.to_dict()}), 400
    except Exception as e:
        logger.error(f"Error updating job {job_id}: {str(e)}")
        return jsonify({'error': 'Failed to update job'}), 500

@jobs_bp.route('/<int:job_id>', methods=['DELETE'])
@login_required
def delete_job(job_id):
    """Delete a job and its items"""
    try:
        storage.delete_job(job_id)
        return '', 204
    except NotFoundError:
        return jsonify({'error': 'Job not found'}), 404
    except Exception as e:
        logger.error(f"Error deleting job {job_id}: {str(e)}")
        return jsonify({'error': 'Failed to delete job'}), 500

# Job item routes nested under a job
@jobs_bp.route('/<int:job_id>/items', methods=['GET'])
@login_required
def get_job_items(job_id):
    """Get all items for a job"""
    try:
        storage.get_job(job_id)
        return jsonify([item.to_dict() for item in storage.get_job_items(job_id)])
    except NotFoundError:
        return jsonify({'error': 'Job not found'}), 404
    except Exception as e:
        logger.error(f"Error fetching items for job {job_id}: {str(e)}")
        return jsonify({'error': 'Failed to fetch job items'}), 500

@jobs_bp.route('/<int:job_id>/items', methods=['POST'])
@login_required
def create_job_item(job_id):
    """Add an item to a job"""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'Failed to create job item', 'details': {'message': 'Request body must be a JSON object'}}), 400

    try:
        item = storage.create_job_item(job_id, data)
        return jsonify(item.to_dict()), 201
    except NotFoundError:
        return jsonify({'error': 'Job not found'}), 404
    except ValidationError as e:
        return jsonify({'error': 'Failed to create job item', 'details': e.to_dict()}), 400
    except Exception as e:
        logger.error(f"Error creating item for job {job_id}: {str(e)}")
        return jsonify({'error': 'Failed to create job item'}), 500
