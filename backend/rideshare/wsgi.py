"""WSGI config for the rideshare backend."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "rideshare.settings.settings")

application = get_wsgi_application()
