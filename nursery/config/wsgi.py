"""
WSGI config for the nursery project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'nursery.config.settings')

application = get_wsgi_application()
