"""
App configuration for the B2B Showcase project.
"""

import logging
import sys

from django.apps import AppConfig
from django.conf import settings

logger = logging.getLogger(__name__)

# Management commands that never serve requests
SKIP_SETUP_COMMANDS = {
    "migrate",
    "makemigrations",
    "collectstatic",
    "shell",
    "test",
    "check",
    "createsuperuser",
}


class B2BShowcaseConfig(AppConfig):
    """App configuration for B2BShowcase."""

    name = "B2BShowcase"
    verbose_name = "B2B Showcase"

    def ready(self):
        """Set up tracing once the app registry is ready."""
        if len(sys.argv) > 1 and sys.argv[1] in SKIP_SETUP_COMMANDS:
            return
        if not getattr(settings, "OTEL_ENABLED", True):
            return

        if getattr(self, "_initialized", False):
            return
        from core.instrumentation import setup_opentelemetry

        logger.info("Setting up observability...")
        setup_opentelemetry()
        self._initialized = True
        logger.info("Observability setup complete")
