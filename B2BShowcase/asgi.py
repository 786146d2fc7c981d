"""
ASGI config for the B2B Showcase project.
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "B2BShowcase.settings.dev")

application = get_asgi_application()
