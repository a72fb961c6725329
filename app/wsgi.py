"""WSGI entry point for Gunicorn (``gunicorn app.wsgi:app``)."""
from app.flask_app import create_app

app = create_app()
