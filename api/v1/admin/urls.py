"""
URL configuration for catalog administration endpoints.
"""

from django.urls import path

from api.v1.admin import views

urlpatterns = [
    path("products/", views.ProductCreateView.as_view(), name="admin-add-product"),
    path(
        "products/<str:product_id>/",
        views.ProductDeleteView.as_view(),
        name="admin-remove-product",
    ),
    path(
        "products/<str:product_id>/image/",
        views.ProductImageView.as_view(),
        name="admin-update-product-image",
    ),
    path(
        "products/<str:product_id>/featured/",
        views.ProductFeaturedView.as_view(),
        name="admin-set-product-featured",
    ),
    path(
        "products/<str:product_id>/stock/",
        views.ProductStockView.as_view(),
        name="admin-set-product-stock",
    ),
    path("categories/", views.CategoryCollectionView.as_view(), name="admin-categories"),
    path(
        "categories/<str:category_id>/",
        views.CategoryDeleteView.as_view(),
        name="admin-remove-category",
    ),
    path(
        "categories/<str:category_id>/image/",
        views.CategoryImageView.as_view(),
        name="admin-update-category-image",
    ),
    path("catalog/reload/", views.CatalogReloadView.as_view(), name="admin-reload-catalog"),
]
