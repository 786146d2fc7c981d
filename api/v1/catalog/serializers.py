"""
Serializers for the public catalog API.
"""

from rest_framework import serializers


class ProductSerializer(serializers.Serializer):
    """Serializer for the Product entity."""

    id = serializers.CharField()
    name = serializers.CharField()
    slug = serializers.CharField()
    description = serializers.CharField()
    price = serializers.FloatField(allow_null=True)
    image_url = serializers.CharField()
    category = serializers.CharField()
    featured = serializers.BooleanField()
    in_stock = serializers.BooleanField()
    specifications = serializers.DictField(child=serializers.CharField(), allow_null=True)
    updated_at = serializers.DateTimeField()
    updated_by = serializers.CharField()


class CategoryKeySerializer(serializers.Serializer):
    """Serializer for a category key derived from the product list."""

    slug = serializers.CharField()
    product_count = serializers.IntegerField()
