# le_dashboard/models/__init__.py

from .base import db

# Import order matters: Job references clients.id, JobItem references jobs.id.

# 1. Foundational Models
from .user import User
from .admin_setting import AdminSetting
from .client import Client

# 2. Jobs and their dependants
from .job import Job, JobItem, JobCounter

__all__ = [
    'db',
    'User',
    'AdminSetting',
    'Client',
    'Job',
    'JobItem',
    'JobCounter',
]
