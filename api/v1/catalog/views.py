"""
Public catalog API views.

Read-only endpoints served from the in-memory catalog:
- Product listing, optionally by category
- Featured products
- Single product lookup
- Category keys derived from the product list
"""

from asgiref.sync import async_to_sync
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from api.v1.catalog.serializers import CategoryKeySerializer, ProductSerializer
from catalog.container import get_catalog_manager
from core.domain.exceptions import ProductNotFoundError
from core.instrumentation import Status, StatusCode, get_tracer

tracer = get_tracer(__name__)


class ProductListView(APIView):
    """View for listing products."""

    @extend_schema(
        operation_id="list_products",
        summary="List Products",
        description="List catalog products, optionally restricted to one category.",
        tags=["Catalog API"],
        parameters=[
            OpenApiParameter(
                name="category",
                type=str,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Category key",
            ),
        ],
        responses={200: ProductSerializer(many=True)},
    )
    def get(self, request: Request) -> Response:
        """List products."""
        return async_to_sync(self._handle_list_products)(request)

    async def _handle_list_products(self, request: Request) -> Response:
        """Async handler for list products."""
        with tracer.start_as_current_span("list_products") as span:
            span.set_attribute("operation", "list_products")
            category = request.query_params.get("category") or None
            if category:
                span.set_attribute("category", category)

            manager = await get_catalog_manager()
            products = manager.list_products(category)

            span.set_attribute("products.count", len(products))
            span.set_status(Status(StatusCode.OK))
            return Response(ProductSerializer(products, many=True).data, status=status.HTTP_200_OK)


class FeaturedProductListView(APIView):
    """View for listing featured products."""

    @extend_schema(
        operation_id="list_featured_products",
        summary="List Featured Products",
        description="List the featured products (at most three).",
        tags=["Catalog API"],
        responses={200: ProductSerializer(many=True)},
    )
    def get(self, request: Request) -> Response:
        """List featured products."""
        return async_to_sync(self._handle_list_featured)(request)

    async def _handle_list_featured(self, request: Request) -> Response:
        with tracer.start_as_current_span("list_featured_products") as span:
            manager = await get_catalog_manager()
            products = manager.featured_products()
            span.set_attribute("products.count", len(products))
            span.set_status(Status(StatusCode.OK))
            return Response(ProductSerializer(products, many=True).data, status=status.HTTP_200_OK)


class ProductDetailView(APIView):
    """View for a single product."""

    @extend_schema(
        operation_id="get_product",
        summary="Get Product",
        tags=["Catalog API"],
        responses={
            200: ProductSerializer,
            404: {"description": "Product not found"},
        },
    )
    def get(self, request: Request, product_id: str) -> Response:
        """Get a product by id."""
        return async_to_sync(self._handle_get_product)(request, product_id)

    async def _handle_get_product(self, request: Request, product_id: str) -> Response:
        with tracer.start_as_current_span("get_product") as span:
            span.set_attribute("product.id", product_id)
            manager = await get_catalog_manager()
            product = manager.get_product(product_id)
            if product is None:
                span.set_status(Status(StatusCode.ERROR, "Product not found"))
                raise ProductNotFoundError(f"Product {product_id} not found")
            span.set_status(Status(StatusCode.OK))
            return Response(ProductSerializer(product).data, status=status.HTTP_200_OK)


class CategoryKeyListView(APIView):
    """View for category keys used by the products."""

    @extend_schema(
        operation_id="list_category_keys",
        summary="List Category Keys",
        description="Distinct product categories in first-seen order.",
        tags=["Catalog API"],
        responses={200: CategoryKeySerializer(many=True)},
    )
    def get(self, request: Request) -> Response:
        """List category keys."""
        return async_to_sync(self._handle_list_categories)(request)

    async def _handle_list_categories(self, request: Request) -> Response:
        with tracer.start_as_current_span("list_category_keys") as span:
            manager = await get_catalog_manager()
            keys = [
                {"slug": key, "product_count": len(manager.list_products(key))}
                for key in manager.list_categories()
            ]
            span.set_attribute("categories.count", len(keys))
            span.set_status(Status(StatusCode.OK))
            return Response(CategoryKeySerializer(keys, many=True).data, status=status.HTTP_200_OK)
