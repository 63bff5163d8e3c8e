"""LE Dashboard API: job tracking, clients and admin back office for the departments."""

__version__ = '1.0.0'
