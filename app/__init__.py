"""Identity/Profile synchronization service.

To use the Flask app:
    from app.flask_app import create_app

To use the core services without Flask:
    from app.core.registration import RegistrationSaga
    from app.core.profiles import ProfileService
    from app.core.sync import SyncPropagator, IdentitySyncService
"""
# Note: We don't import flask_app by default so CLI scripts can use app.core
# without loading settings at import time
