"""ASGI entry point for the crudml project."""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "crudml.settings")

application = get_asgi_application()
