"""
AddProductCommand.

Command carrying the admin-entered fields of a new product.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class AddProductCommand:
    """
    Command to add a product to the catalog.

    ``price`` is kept as entered; it is validated and converted by the
    state manager. The slug is derived from the name unless given.
    """

    name: Optional[str]
    description: Optional[str]
    price: Any
    category: Optional[str]
    image_url: Optional[str] = None
    specifications: Optional[Dict[str, Any]] = None
    slug: Optional[str] = None

    @classmethod
    def from_record(cls, data: Dict[str, Any]) -> "AddProductCommand":
        """
        Build a command from a camelCase product draft.

        Args:
            data: Draft with ``name``, ``description``, ``price``,
                ``category`` and optional ``imageUrl``/``specifications``/``slug``

        Returns:
            AddProductCommand
        """
        return cls(
            name=data.get("name"),
            description=data.get("description"),
            price=data.get("price"),
            category=data.get("category"),
            image_url=data.get("imageUrl") or data.get("image_url"),
            specifications=data.get("specifications"),
            slug=data.get("slug"),
        )
