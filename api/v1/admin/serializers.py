"""
Serializers for the catalog administration API.

Required product fields are checked by the catalog itself so that the
error names every missing field at once.
"""

from rest_framework import serializers


class AddProductRequestSerializer(serializers.Serializer):
    """Serializer for add product request (JSON or multipart)."""

    name = serializers.CharField(required=False, allow_blank=True, max_length=200)
    description = serializers.CharField(required=False, allow_blank=True)
    price = serializers.FloatField(required=False, allow_null=True)
    category = serializers.CharField(required=False, allow_blank=True, max_length=100)
    slug = serializers.CharField(required=False, allow_blank=True, max_length=200)
    image_url = serializers.CharField(required=False, allow_blank=True)
    image = serializers.FileField(required=False)
    specifications = serializers.DictField(
        child=serializers.CharField(allow_blank=True), required=False
    )


class CreatedResponseSerializer(serializers.Serializer):
    """Serializer for creation responses."""

    id = serializers.CharField()


class ImageUpdateRequestSerializer(serializers.Serializer):
    """Serializer for image updates: either a hosted URL or a file."""

    image_url = serializers.CharField(required=False, allow_blank=True)
    image = serializers.FileField(required=False)

    def validate(self, attrs):
        """Require exactly one image source."""
        has_url = bool(attrs.get("image_url", "").strip())
        has_file = attrs.get("image") is not None
        if has_url == has_file:
            raise serializers.ValidationError("Provide either image_url or image")
        return attrs


class FeaturedRequestSerializer(serializers.Serializer):
    """Serializer for featured flag updates."""

    featured = serializers.BooleanField(required=True)


class StockRequestSerializer(serializers.Serializer):
    """Serializer for stock flag updates."""

    in_stock = serializers.BooleanField(required=True)


class AddCategoryRequestSerializer(serializers.Serializer):
    """Serializer for add category request."""

    title = serializers.CharField(required=True, allow_blank=True, max_length=100)
    image_url = serializers.CharField(required=False, allow_blank=True, default="")


class CategorySerializer(serializers.Serializer):
    """Serializer for the Category entity."""

    id = serializers.CharField()
    title = serializers.CharField()
    slug = serializers.CharField()
    image_url = serializers.CharField(allow_blank=True)
    product_count = serializers.IntegerField()
    updated_at = serializers.DateTimeField()
    updated_by = serializers.CharField()


class CategoryImageResponseSerializer(serializers.Serializer):
    """Serializer for category image updates."""

    id = serializers.CharField()
    image_url = serializers.CharField()


class ReloadResponseSerializer(serializers.Serializer):
    """Serializer for catalog reload responses."""

    source = serializers.ChoiceField(choices=["remote", "cache", "seed"])
    products = serializers.IntegerField()
