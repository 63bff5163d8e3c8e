# WSGI entry point, e.g. ``gunicorn le_dashboard.wsgi:app``
from le_dashboard.app import create_app

app = create_app('production')
