"""Application layer - Services orchestrating the catalog domain.

- **CategoryTreeManager**: tree rules, views and subtree deletion
- **ProductMembershipValidator**: category-id normalization and link management
- **CatalogEngine**: request-scoped orchestration returning operation results
- **UserService**: account registration and self-service profile management
"""

from catalog_api.application.catalog_engine import CatalogEngine, CategoryDeletion
from catalog_api.application.category_tree import CategoryTreeManager
from catalog_api.application.membership import (
    ProductMembershipValidator,
    normalize_category_ids,
)
from catalog_api.application.results import OperationResult
from catalog_api.application.user_service import UserPatch, UserRegistration, UserService

__all__ = [
    "CatalogEngine",
    "CategoryDeletion",
    "CategoryTreeManager",
    "OperationResult",
    "ProductMembershipValidator",
    "UserPatch",
    "UserRegistration",
    "UserService",
    "normalize_category_ids",
]
