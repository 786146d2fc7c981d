"""
Django admin configuration for catalog app.
"""

from django.contrib import admin

from catalog.infrastructure.models import CatalogDocument


@admin.register(CatalogDocument)
class CatalogDocumentAdmin(admin.ModelAdmin):
    """Admin interface for CatalogDocument model."""

    list_display = ["collection", "document_id", "name_display", "updated_at"]
    list_filter = ["collection", "updated_at"]
    search_fields = ["document_id"]
    readonly_fields = ["id", "created_at", "updated_at"]
    fieldsets = (
        (
            "Document",
            {
                "fields": ("id", "collection", "document_id", "data"),
            },
        ),
        (
            "Timestamps",
            {
                "fields": ("created_at", "updated_at"),
                "classes": ("collapse",),
            },
        ),
    )

    def name_display(self, obj):
        """Display the product name or category title."""
        data = obj.data or {}
        return data.get("name") or data.get("title") or "-"

    name_display.short_description = "Name"
