"""
WSGI config for the B2B Showcase project.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "B2BShowcase.settings.dev")

application = get_wsgi_application()
