"""
Routes package for the LE Dashboard API
This package contains all the Flask blueprints for the different API endpoints.
"""

from le_dashboard.routes.auth import auth_bp
from le_dashboard.routes.users import users_bp
from le_dashboard.routes.admin import admin_bp
from le_dashboard.routes.clients import clients_bp
from le_dashboard.routes.jobs import jobs_bp
from le_dashboard.routes.job_items import job_items_bp
from le_dashboard.routes.analytics import analytics_bp
from le_dashboard.routes.health import health_bp

# (blueprint, url_prefix) pairs registered by the app factory
BLUEPRINTS = [
    (auth_bp, '/api/auth'),
    (users_bp, '/api/users'),
    (admin_bp, '/api/admin'),
    (clients_bp, '/api/clients'),
    (jobs_bp, '/api/jobs'),
    (job_items_bp, '/api/job-items'),
    (analytics_bp, '/api/analytics'),
    (health_bp, '/api'),  # Health check endpoint
]

__all__ = [
    'auth_bp',
    'users_bp',
    'admin_bp',
    'clients_bp',
    'jobs_bp',
    'job_items_bp',
    'analytics_bp',
    'health_bp',
    'BLUEPRINTS',
]
