import logging

from django.apps import apps
from django.conf import settings
from django.core.management import call_command
from django.core.management.base import BaseCommand

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Create the transactions table if needed and serve the payments API."

    def add_arguments(self, parser):
        parser.add_argument('--host', default='0.0.0.0')
        parser.add_argument('--port', type=int, default=None,
                            help="Listen port (defaults to the PORT setting).")

    def handle(self, *args, **options):
        port = options['port'] or settings.PORT
        call_command('migrate', interactive=False, verbosity=0)
        logger.info("Database initialized")

        store = apps.get_app_config('payments').store
        store.open()
        try:
            logger.info("Backend running on port %s", port)
            call_command('runserver', f"{options['host']}:{port}", use_reloader=False)
        finally:
            store.close()
