from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from scheduling.document import DocumentError
from scheduling.publishing import PublishError, PublishUnauthorized, publish_document
from scheduling.services import get_document_store


class Command(BaseCommand):
    help = 'Publishes the local club document to the public site.'

    def add_arguments(self, parser):
        parser.add_argument('--endpoint', default=None, help='Publish endpoint URL. Defaults to the PUBLISH_ENDPOINT setting.')
        parser.add_argument('--key', default=None, help='Publish key. Defaults to the PUBLISH_KEY setting.')

    def handle(self, *args, **options):
        endpoint = options['endpoint'] or settings.PUBLISH_ENDPOINT
        try:
            document = get_document_store().load()
        except DocumentError as e:
            raise CommandError(str(e))

        self.stdout.write(f"Publishing {len(document.trainings)} trainings to {endpoint}...")
        try:
            reply = publish_document(document, endpoint=endpoint, key=options['key'])
        except PublishUnauthorized:
            raise CommandError('Publish failed: Unauthorized. Check the publish key.')
        except PublishError as e:
            raise CommandError(f'Publish failed: {e}')

        self.stdout.write(self.style.SUCCESS("Published."))
        if 'trainings' in reply:
            self.stdout.write(f"Server stored {reply['trainings']} trainings.")
