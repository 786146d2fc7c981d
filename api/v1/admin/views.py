"""
Catalog administration API views.

These endpoints back the admin panel. Access is restricted to staff
sessions by ``AdminGateMiddleware``; the acting user's email is stamped
into every change through the identity context.
"""

from asgiref.sync import async_to_sync
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from api.v1.admin.serializers import (
    AddCategoryRequestSerializer,
    AddProductRequestSerializer,
    CategoryImageResponseSerializer,
    CategorySerializer,
    CreatedResponseSerializer,
    FeaturedRequestSerializer,
    ImageUpdateRequestSerializer,
    ReloadResponseSerializer,
    StockRequestSerializer,
)
from api.v1.catalog.serializers import ProductSerializer
from catalog.application.commands.add_category import AddCategoryCommand
from catalog.application.commands.add_product import AddProductCommand
from catalog.container import get_catalog_manager, get_category_manager
from catalog.ports.image_host import ImageUpload
from core.domain.exceptions import ProductNotFoundError, ValidationError
from core.instrumentation import Status, StatusCode, get_tracer

tracer = get_tracer(__name__)

UPLOAD_PARSERS = [JSONParser, MultiPartParser, FormParser]


def _invalid(span, serializer) -> Response:
    """Build the 400 response for a rejected request body."""
    span.set_attribute("error", "validation_failed")
    span.set_attribute("error.details", str(serializer.errors))
    span.set_status(Status(StatusCode.ERROR, "Validation failed"))
    return Response(
        {
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "Invalid request",
                "details": serializer.errors,
            }
        },
        status=status.HTTP_400_BAD_REQUEST,
    )


def _to_upload(uploaded_file) -> ImageUpload:
    """Convert an uploaded file into an ImageUpload."""
    try:
        return ImageUpload(
            filename=uploaded_file.name,
            content=uploaded_file.read(),
            content_type=getattr(uploaded_file, "content_type", None)
            or "application/octet-stream",
        )
    except ValueError as e:
        raise ValidationError(str(e)) from e


def _updated(product, product_id: str) -> Response:
    if product is None:
        raise ProductNotFoundError(f"Product {product_id} not found")
    return Response(ProductSerializer(product).data, status=status.HTTP_200_OK)


class ProductCreateView(APIView):
    """View for adding products."""

    parser_classes = UPLOAD_PARSERS

    @extend_schema(
        operation_id="add_product",
        summary="Add Product",
        description=(
            "Create a product. Send JSON, or multipart form data with an "
            "``image`` file to host the product image."
        ),
        tags=["Admin API"],
        request=AddProductRequestSerializer,
        responses={
            201: CreatedResponseSerializer,
            400: {"description": "Bad Request"},
            401: {"description": "Unauthorized"},
            403: {"description": "Forbidden - staff only"},
            502: {"description": "Remote store unavailable"},
        },
    )
    def post(self, request: Request) -> Response:
        """Add a product."""
        return async_to_sync(self._handle_add_product)(request)

    async def _handle_add_product(self, request: Request) -> Response:
        with tracer.start_as_current_span("add_product") as span:
            span.set_attribute("operation", "add_product")

            serializer = AddProductRequestSerializer(data=request.data)
            if not serializer.is_valid():
                return _invalid(span, serializer)

            data = serializer.validated_data
            command = AddProductCommand(
                name=data.get("name"),
                description=data.get("description"),
                price=data.get("price"),
                category=data.get("category"),
                image_url=data.get("image_url") or None,
                specifications=data.get("specifications"),
                slug=data.get("slug") or None,
            )
            image = _to_upload(data["image"]) if data.get("image") else None
            span.set_attribute("image.uploaded", image is not None)

            manager = await get_catalog_manager()
            product_id = await manager.add_product(command, image)

            span.set_attribute("product.id", product_id)
            span.set_status(Status(StatusCode.OK))
            return Response(
                CreatedResponseSerializer({"id": product_id}).data,
                status=status.HTTP_201_CREATED,
            )


class ProductDeleteView(APIView):
    """View for deleting products."""

    @extend_schema(
        operation_id="remove_product",
        summary="Remove Product",
        description="Delete a product. Unknown ids succeed without effect.",
        tags=["Admin API"],
        responses={
            204: None,
            401: {"description": "Unauthorized"},
            403: {"description": "Forbidden - staff only"},
            502: {"description": "Remote store unavailable"},
        },
    )
    def delete(self, request: Request, product_id: str) -> Response:
        """Remove a product."""
        return async_to_sync(self._handle_remove_product)(request, product_id)

    async def _handle_remove_product(self, request: Request, product_id: str) -> Response:
        with tracer.start_as_current_span("remove_product") as span:
            span.set_attribute("product.id", product_id)
            manager = await get_catalog_manager()
            removed = await manager.remove_product(product_id)
            span.set_attribute("product.removed", removed)
            span.set_status(Status(StatusCode.OK))
            return Response(status=status.HTTP_204_NO_CONTENT)


class ProductImageView(APIView):
    """View for updating product images."""

    parser_classes = UPLOAD_PARSERS

    @extend_schema(
        operation_id="update_product_image",
        summary="Update Product Image",
        description=(
            "Set the product image from a hosted URL (``image_url``) or "
            "upload a file (``image``). The stored URL carries a fresh "
            "cache-busting parameter."
        ),
        tags=["Admin API"],
        request=ImageUpdateRequestSerializer,
        responses={
            200: ProductSerializer,
            400: {"description": "Bad Request"},
            404: {"description": "Product not found"},
            502: {"description": "Image upload failed"},
        },
    )
    def patch(self, request: Request, product_id: str) -> Response:
        """Update a product image."""
        return async_to_sync(self._handle_update_image)(request, product_id)

    async def _handle_update_image(self, request: Request, product_id: str) -> Response:
        with tracer.start_as_current_span("update_product_image") as span:
            span.set_attribute("product.id", product_id)

            serializer = ImageUpdateRequestSerializer(data=request.data)
            if not serializer.is_valid():
                return _invalid(span, serializer)

            manager = await get_catalog_manager()
            if serializer.validated_data.get("image") is not None:
                upload = _to_upload(serializer.validated_data["image"])
                product = await manager.replace_product_image(product_id, upload)
            else:
                product = await manager.update_image(
                    product_id, serializer.validated_data["image_url"]
                )

            span.set_status(Status(StatusCode.OK))
            return _updated(product, product_id)


class ProductFeaturedView(APIView):
    """View for featuring products."""

    @extend_schema(
        operation_id="set_product_featured",
        summary="Set Featured",
        description="Feature or unfeature a product. At most three products can be featured.",
        tags=["Admin API"],
        request=FeaturedRequestSerializer,
        responses={
            200: ProductSerializer,
            400: {"description": "Bad Request"},
            404: {"description": "Product not found"},
            409: {"description": "Featured product limit reached"},
            502: {"description": "Remote store unavailable"},
        },
    )
    def patch(self, request: Request, product_id: str) -> Response:
        """Set the featured flag."""
        return async_to_sync(self._handle_set_featured)(request, product_id)

    async def _handle_set_featured(self, request: Request, product_id: str) -> Response:
        with tracer.start_as_current_span("set_product_featured") as span:
            span.set_attribute("product.id", product_id)

            serializer = FeaturedRequestSerializer(data=request.data)
            if not serializer.is_valid():
                return _invalid(span, serializer)

            featured = serializer.validated_data["featured"]
            span.set_attribute("product.featured", featured)

            manager = await get_catalog_manager()
            product = await manager.set_featured(product_id, featured)

            span.set_status(Status(StatusCode.OK))
            return _updated(product, product_id)


class ProductStockView(APIView):
    """View for stock updates."""

    @extend_schema(
        operation_id="set_product_stock",
        summary="Set In Stock",
        tags=["Admin API"],
        request=StockRequestSerializer,
        responses={
            200: ProductSerializer,
            400: {"description": "Bad Request"},
            404: {"description": "Product not found"},
            502: {"description": "Remote store unavailable"},
        },
    )
    def patch(self, request: Request, product_id: str) -> Response:
        """Set the stock flag."""
        return async_to_sync(self._handle_set_in_stock)(request, product_id)

    async def _handle_set_in_stock(self, request: Request, product_id: str) -> Response:
        with tracer.start_as_current_span("set_product_stock") as span:
            span.set_attribute("product.id", product_id)

            serializer = StockRequestSerializer(data=request.data)
            if not serializer.is_valid():
                return _invalid(span, serializer)

            manager = await get_catalog_manager()
            product = await manager.set_in_stock(product_id, serializer.validated_data["in_stock"])

            span.set_status(Status(StatusCode.OK))
            return _updated(product, product_id)


class CategoryCollectionView(APIView):
    """View for listing and adding categories."""

    @extend_schema(
        operation_id="list_categories",
        summary="List Categories",
        description="List categories that are not deleted.",
        tags=["Admin API"],
        responses={
            200: CategorySerializer(many=True),
            502: {"description": "Remote store unavailable"},
        },
    )
    def get(self, request: Request) -> Response:
        """List categories."""
        return async_to_sync(self._handle_list_categories)(request)

    async def _handle_list_categories(self, request: Request) -> Response:
        with tracer.start_as_current_span("list_categories") as span:
            categories = await get_category_manager().list_categories()
            span.set_attribute("categories.count", len(categories))
            span.set_status(Status(StatusCode.OK))
            return Response(CategorySerializer(categories, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="add_category",
        summary="Add Category",
        tags=["Admin API"],
        request=AddCategoryRequestSerializer,
        responses={
            201: CreatedResponseSerializer,
            400: {"description": "Bad Request"},
            502: {"description": "Remote store unavailable"},
        },
    )
    def post(self, request: Request) -> Response:
        """Add a category."""
        return async_to_sync(self._handle_add_category)(request)

    async def _handle_add_category(self, request: Request) -> Response:
        with tracer.start_as_current_span("add_category") as span:
            serializer = AddCategoryRequestSerializer(data=request.data)
            if not serializer.is_valid():
                return _invalid(span, serializer)

            command = AddCategoryCommand(
                title=serializer.validated_data["title"],
                image_url=serializer.validated_data.get("image_url", ""),
            )
            category_id = await get_category_manager().add_category(command)

            span.set_attribute("category.id", category_id)
            span.set_status(Status(StatusCode.OK))
            return Response(
                CreatedResponseSerializer({"id": category_id}).data,
                status=status.HTTP_201_CREATED,
            )


class CategoryDeleteView(APIView):
    """View for removing categories."""

    @extend_schema(
        operation_id="remove_category",
        summary="Remove Category",
        description="Mark a category as deleted. The record is kept.",
        tags=["Admin API"],
        responses={
            204: None,
            404: {"description": "Category not found"},
            502: {"description": "Remote store unavailable"},
        },
    )
    def delete(self, request: Request, category_id: str) -> Response:
        """Remove a category."""
        return async_to_sync(self._handle_remove_category)(request, category_id)

    async def _handle_remove_category(self, request: Request, category_id: str) -> Response:
        with tracer.start_as_current_span("remove_category") as span:
            span.set_attribute("category.id", category_id)
            await get_category_manager().remove_category(category_id)
            span.set_status(Status(StatusCode.OK))
            return Response(status=status.HTTP_204_NO_CONTENT)


class CategoryImageView(APIView):
    """View for updating category images."""

    parser_classes = UPLOAD_PARSERS

    @extend_schema(
        operation_id="update_category_image",
        summary="Update Category Image",
        tags=["Admin API"],
        request=ImageUpdateRequestSerializer,
        responses={
            200: CategoryImageResponseSerializer,
            400: {"description": "Bad Request"},
            404: {"description": "Category not found"},
            502: {"description": "Upload or remote store failure"},
        },
    )
    def patch(self, request: Request, category_id: str) -> Response:
        """Update a category image."""
        return async_to_sync(self._handle_update_image)(request, category_id)

    async def _handle_update_image(self, request: Request, category_id: str) -> Response:
        with tracer.start_as_current_span("update_category_image") as span:
            span.set_attribute("category.id", category_id)

            serializer = ImageUpdateRequestSerializer(data=request.data)
            if not serializer.is_valid():
                return _invalid(span, serializer)

            manager = get_category_manager()
            if serializer.validated_data.get("image") is not None:
                upload = _to_upload(serializer.validated_data["image"])
                image_url = await manager.upload_category_image(category_id, upload)
            else:
                image_url = await manager.update_category_image(
                    category_id, serializer.validated_data["image_url"]
                )

            span.set_status(Status(StatusCode.OK))
            return Response(
                CategoryImageResponseSerializer({"id": category_id, "image_url": image_url}).data,
                status=status.HTTP_200_OK,
            )


class CatalogReloadView(APIView):
    """View for reloading the in-memory catalog."""

    @extend_schema(
        operation_id="reload_catalog",
        summary="Reload Catalog",
        description=(
            "Reload products from the remote store, falling back to the "
            "local cache and then to the seed catalog."
        ),
        tags=["Admin API"],
        request=None,
        responses={200: ReloadResponseSerializer},
    )
    def post(self, request: Request) -> Response:
        """Reload the catalog."""
        return async_to_sync(self._handle_reload)(request)

    async def _handle_reload(self, request: Request) -> Response:
        with tracer.start_as_current_span("reload_catalog") as span:
            manager = await get_catalog_manager()
            source = await manager.load_initial()
            products = len(manager.list_products())
            span.set_attribute("catalog.source", source)
            span.set_status(Status(StatusCode.OK))
            return Response(
                ReloadResponseSerializer({"source": source, "products": products}).data,
                status=status.HTTP_200_OK,
            )
