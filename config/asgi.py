"""
ASGI config for the Tuma-Africa Link Cargo project.

It exposes the ASGI callable as a module-level variable named ``application``.
HTTP requests go to Django; Engine.IO long-polling and WebSocket traffic under
``settings.SOCKETIO_PATH`` go to the Socket.IO server.

For more information on this file, see
https://docs.djangoproject.com/en/dev/howto/deployment/asgi/

"""

from django.core.asgi import get_asgi_application

from config.settings import use_default_settings

use_default_settings()

django_application = get_asgi_application()

from django.conf import settings  # noqa: E402
from socketio import ASGIApp  # noqa: E402

from tuma_cargo.realtime.socketio import sio  # noqa: E402

# Socket.IO wraps Django because it serves both Engine.IO long-polling
# and WebSocket upgrades on the same path.
application = ASGIApp(
    sio,
    other_asgi_app=django_application,
    socketio_path=settings.SOCKETIO_PATH,
)
