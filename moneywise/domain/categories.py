"""Category registry - the set of categories budgets and transactions may use"""

from typing import Optional, Protocol

from moneywise.domain.exceptions import ValidationError


class CategoryRecord(Protocol):
    name: str
    type: str
    active: bool


class CategoryLookup(Protocol):
    def get_by_name(self, name: str) -> Optional[CategoryRecord]: ...


class CategoryRegistry:
    """
    Validates category names against the shared registry.

    The registry is passed explicitly to the handlers that need it, so
    tests and callers control which categories exist.
    """

    def __init__(self, lookup: CategoryLookup):
        self.lookup = lookup

    def require_active(self, name: str, type: Optional[str] = None) -> CategoryRecord:
        """
        Return the active category called `name`.

        When `type` is given the category must also be of that type.

        Raises:
            ValidationError: Unknown, inactive or mismatched category
        """
        category = self.lookup.get_by_name(name)
        if category is None or not category.active:
            raise ValidationError("Invalid or inactive category")
        if type is not None and category.type != type:
            raise ValidationError(f"Category '{name}' cannot be used for {type} transactions")
        return category
