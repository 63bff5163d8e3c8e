# le_dashboard/routes/clients.py
from flask import Blueprint, request, jsonify
from flask_login import login_required
from le_dashboard.services.storage import storage
from le_dashboard.services.errors import NotFoundError, ValidationError
import logging
import re

clients_bp = Blueprint('clients', __name__)
logger = logging.getLogger(__name__)

EMAIL_PATTERN = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
EMAIL_FIELDS = ('email', 'deliveryEmail', 'pLedgerEmail')

def validate_emails(data):
    """Return an error message for the first malformed email field, or None"""
    for field in EMAIL_FIELDS:
        value = data.get(field)
        if value and isinstance(value, str) and value.strip():
            if not re.match(EMAIL_PATTERN, value.strip()):
                return f'Please enter a valid email address for {field}'
    return None

@clients_bp.route('', methods=['GET'])
@login_required
def get_clients():
    """Get all active clients, optionally filtered by application status"""
    try:
        clients = storage.get_all_clients(status=request.args.get('status'))
        return jsonify([client.to_dict() for client in clients])
    except Exception as e:
        logger.error(f"Error retrieving clients: {str(e)}")
        return jsonify({'error': 'Failed to fetch clients'}), 500

@clients_bp.route('', methods=['POST'])
@login_required
def create_client():
    """Create a new client / credit application"""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'Failed to create client', 'details': {'message': 'Request body must be a JSON object'}}), 400

    email_error = validate_emails(data)
    if email_error:
        return jsonify({'error': 'Failed to create client', 'details': {'message': email_error}}), 400

    try:
        client = storage.create_client(data)
        return jsonify(client.to_dict()), 201
    except ValidationError as e:
        return jsonify({'error': 'Failed to create client', 'details': e.to_dict()}), 400
    except Exception as e:
        logger.error(f"Error creating client: {str(e)}")
        return jsonify({'error': 'Failed to create client'}), 500

@clients_bp.route('/<int:client_id>', methods=['GET'])
@login_required
def get_client(client_id):
    """Get a specific client"""
    try:
        return jsonify(storage.get_client(client_id).to_dict())
    except NotFoundError:
        return jsonify({'error': 'Client not found'}), 404
    except Exception as e:
        logger.error(f"Error retrieving client {client_id}: {str(e)}")
        return jsonify({'error': 'Failed to fetch client'}), 500

@clients_bp.route('/<int:client_id>', methods=['PUT'])
@login_required
def update_client(client_id):
    """Update a client"""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'Request body must be a JSON object'}), 400

    email_error = validate_emails(data)
    if email_error:
        return jsonify({'error': 'Failed to update client', 'details': {'message': email_error}}), 400

    try:
        client = storage.update_client(client_id, data)
        return jsonify(client.to_dict())
    except NotFoundError:
        return jsonify({'error': 'Client not found'}), 404
    except ValidationError as e:
        return jsonify({'error': 'Failed to update client', 'details': e.to_dict()}), 400
    except Exception as e:
        logger.error(f"Error updating client {client_id}: {str(e)}")
        return jsonify({'error': 'Failed to update client'}), 500

@clients_bp.route('/<int:client_id>', methods=['DELETE'])
@login_required
def delete_client(client_id):
    """Delete a client; their jobs are kept and unlinked"""
    try:
        storage.delete_client(client_id)
        return '', 204
    except NotFoundError:
        return jsonify({'error': 'Client not found'}), 404
    except Exception as e:
        logger.error(f"Error deleting client {client_id}: {str(e)}")
        return jsonify({'error': 'Failed to delete client'}), 500

# Credit application review
@clients_bp.route('/<int:client_id>/approve', methods=['PUT'])
@login_required
def approve_client(client_id):
    """Approve a client's credit application"""
    try:
        return jsonify(storage.approve_client(client_id).to_dict())
    except NotFoundError:
        return jsonify({'error': 'Client not found'}), 404
    except Exception as e:
        logger.error(f"Error approving client {client_id}: {str(e)}")
        return jsonify({'error': 'Failed to approve client'}), 500

@clients_bp.route('/<int:client_id>/reject', methods=['PUT'])
@login_required
def reject_client(client_id):
    """Reject a client's credit application"""
    try:
        return jsonify(storage.reject_client(client_id).to_dict())
    except NotFoundError:
        return jsonify({'error': 'Client not found'}), 404
    except Exception as e:
        logger.error(f"Error rejecting client {client_id}: {str(e)}")
        return jsonify({'error': 'Failed to reject client'}), 500
