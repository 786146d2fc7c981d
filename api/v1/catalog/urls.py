"""
URL configuration for public catalog endpoints.
"""

from django.urls import path

from api.v1.catalog import views

urlpatterns = [
    path("products/", views.ProductListView.as_view(), name="list-products"),
    path(
        "products/featured/",
        views.FeaturedProductListView.as_view(),
        name="list-featured-products",
    ),
    path(
        "products/<str:product_id>/",
        views.ProductDetailView.as_view(),
        name="get-product",
    ),
    path("categories/", views.CategoryKeyListView.as_view(), name="list-category-keys"),
]
