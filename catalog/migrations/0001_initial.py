from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="CatalogDocument",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                (
                    "collection",
                    models.CharField(help_text="Collection name", max_length=100),
                ),
                (
                    "document_id",
                    models.CharField(help_text="Document identifier", max_length=128),
                ),
                ("data", models.JSONField(default=dict, help_text="Document body")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "catalog_documents",
                "ordering": ["collection", "created_at"],
                "indexes": [
                    models.Index(fields=["collection"], name="catalog_doc_collection_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("collection", "document_id"),
                        name="unique_catalog_document",
                    ),
                ],
            },
        ),
    ]
