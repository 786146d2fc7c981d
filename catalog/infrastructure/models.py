"""
Catalog document model.
"""
from django.db import models


class CatalogDocument(models.Model):
    """
    A schemaless catalog document (product or category).

    Documents are addressed by ``(collection, document_id)`` and keep
    their body as JSON, mirroring a hosted document database.
    """

    collection = models.CharField(max_length=100, help_text="Collection name")
    document_id = models.CharField(max_length=128, help_text="Document identifier")
    data = models.JSONField(default=dict, help_text="Document body")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        app_label = "catalog"
        db_table = "catalog_documents"
        ordering = ["collection", "created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["collection", "document_id"],
                name="unique_catalog_document",
            ),
        ]
        indexes = [
            models.Index(fields=["collection"], name="catalog_doc_collection_idx"),
        ]

    def __str__(self):
        return f"{self.collection}/{self.document_id}"
