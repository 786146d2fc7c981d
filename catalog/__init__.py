"""
Catalog module - Product and category catalog.

This module handles:
- Product and Category entities and the featured-product rule
- Catalog store, image host and identity ports
- The catalog state manager and category manager
- Infrastructure adapters (Django ORM store, Django cache, Cloudinary)
"""
