"""
AddCategoryCommand.
"""

from dataclasses import dataclass


@dataclass
class AddCategoryCommand:
    """Command to add a category."""

    title: str
    image_url: str = ""
