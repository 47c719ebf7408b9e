"""WSGI entry point for the crudml project."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "crudml.settings")

application = get_wsgi_application()
