"""
Django management command to seed the catalog store.

Writes the seed products and categories to an empty store so that a new
deployment starts with the showcase catalog. Optionally creates a staff
superuser for the admin API.
"""

import logging

from asgiref.sync import async_to_sync
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

from catalog.config import CatalogSettings
from catalog.domain.product import Product
from catalog.domain.seed import SEED_PRODUCT_DATA, seed_categories
from catalog.infrastructure.stores.django_document_store import DjangoDocumentStore
from catalog.ports.catalog_store import CATEGORIES, PRODUCTS, SERVER_TIMESTAMP, CatalogStore

logger = logging.getLogger(__name__)
User = get_user_model()


class Command(BaseCommand):
    """Command to seed the catalog."""

    help = "Seed the catalog store with the showcase products and categories"

    def add_arguments(self, parser):
        """Add command arguments."""
        parser.add_argument(
            "--force",
            action="store_true",
            help="Write seed records even if the collections are not empty",
        )
        parser.add_argument(
            "--skip-categories",
            action="store_true",
            help="Only seed products",
        )
        parser.add_argument(
            "--with-superuser",
            action="store_true",
            help="Create an admin/admin staff superuser",
        )

    def handle(self, *args, **options):
        """Execute the command."""
        if options["with_superuser"]:
            self.create_superuser()

        settings = CatalogSettings.from_django_settings()
        store = DjangoDocumentStore()
        products, categories = async_to_sync(self.seed)(
            store, settings.system_identity, options["force"], options["skip_categories"]
        )
        # pylint: disable=no-member
        self.stdout.write(
            self.style.SUCCESS(f"Seeded {products} product(s) and {categories} category(ies)")
        )

    async def seed(self, store: CatalogStore, updated_by: str, force: bool, skip_categories: bool):
        """Write seed records into empty collections."""
        products = 0
        if force or not await store.get_all(PRODUCTS):
            for data in SEED_PRODUCT_DATA:
                record = Product.from_record(data["id"], {**data, "updatedBy": updated_by}).to_record()
                record["updatedAt"] = SERVER_TIMESTAMP
                await store.set_full(PRODUCTS, data["id"], record)
                products += 1
        else:
            # pylint: disable=no-member
            self.stdout.write(self.style.WARNING("Products already present, use --force to overwrite"))

        categories = 0
        if skip_categories:
            return products, categories

        if force or not await store.get_all(CATEGORIES):
            for category in seed_categories(updated_by):
                record = category.to_record()
                record["updatedAt"] = SERVER_TIMESTAMP
                await store.set_full(CATEGORIES, category.id, record)
                categories += 1
        else:
            # pylint: disable=no-member
            self.stdout.write(
                self.style.WARNING("Categories already present, use --force to overwrite")
            )
        return products, categories

    def create_superuser(self):
        """Create a staff superuser if it doesn't exist."""
        username = "admin"
        email = "admin@b2b-showcase.com"
        password = "admin"

        if User.objects.filter(username=username).exists():
            # pylint: disable=no-member
            self.stdout.write(self.style.WARNING(f"Superuser '{username}' already exists"))
            return

        User.objects.create_superuser(username=username, email=email, password=password)
        # pylint: disable=no-member
        self.stdout.write(self.style.SUCCESS(f"Created superuser: {username} / {password}"))
