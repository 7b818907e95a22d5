"""
WSGI entry point for plain HTTP deployments of the cargo API.

Socket.IO needs the ASGI application in ``config.asgi``; this one only serves
the REST endpoints, the admin and the schema views.
"""

from django.core.wsgi import get_wsgi_application

from config.settings import use_default_settings

use_default_settings()

application = get_wsgi_application()
