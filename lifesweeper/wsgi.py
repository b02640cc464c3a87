"""
WSGI config for the LifeSweeper project.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'lifesweeper.settings')

application = get_wsgi_application()
