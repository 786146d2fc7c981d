"""
Domain exceptions.

Domain exceptions represent business rule violations
and domain-specific error conditions.
"""


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    def __init__(self, message: str, code: str = None):
        """
        Initialize domain exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class CatalogException(DomainException):
    """Base exception for catalog-related errors."""

    pass


class ValidationError(CatalogException):
    """Raised when required catalog fields are missing or invalid."""

    def __init__(self, message: str = "Invalid catalog data", code: str = "VALIDATION_ERROR"):
        super().__init__(message, code=code)


class MalformedRecordError(ValidationError):
    """Raised when a stored record cannot be decoded into a catalog entity."""

    def __init__(self, message: str = "Malformed catalog record"):
        super().__init__(message, code="MALFORMED_RECORD")


class NotFoundError(CatalogException):
    """Raised when an operation targets an id absent from the catalog."""

    def __init__(self, message: str = "Catalog entry not found", code: str = "NOT_FOUND"):
        super().__init__(message, code=code)


class ProductNotFoundError(NotFoundError):
    """Raised when a product is not found."""

    def __init__(self, message: str = "Product not found"):
        super().__init__(message, code="PRODUCT_NOT_FOUND")


class CategoryNotFoundError(NotFoundError):
    """Raised when a category is not found."""

    def __init__(self, message: str = "Category not found"):
        super().__init__(message, code="CATEGORY_NOT_FOUND")


class CapacityExceededError(CatalogException):
    """Raised when the featured product limit would be exceeded."""

    def __init__(self, message: str = "Featured product limit exceeded"):
        super().__init__(message, code="FEATURED_CAPACITY_EXCEEDED")


class InfrastructureException(DomainException):
    """Base exception for failures of external collaborators."""

    pass


class RemoteStoreError(InfrastructureException):
    """Raised when the remote catalog store fails a request."""

    def __init__(self, message: str = "Remote catalog store request failed"):
        super().__init__(message, code="REMOTE_STORE_ERROR")


class CacheError(InfrastructureException):
    """Raised when the local cache cannot be read or written."""

    def __init__(self, message: str = "Local cache operation failed"):
        super().__init__(message, code="CACHE_ERROR")


class ImageHostingError(InfrastructureException):
    """Raised when the image hosting service rejects or fails an upload."""

    def __init__(self, message: str = "Image upload failed"):
        super().__init__(message, code="IMAGE_HOSTING_ERROR")
