#!/usr/bin/env python3
"""Seed catalog script.

Creates the database tables and a small sample catalog: a category tree,
a handful of products (one inactive) and an admin user.

Usage:
    python scripts/seed_catalog.py
    python scripts/seed_catalog.py --database-url postgresql+asyncpg://...
    python scripts/seed_catalog.py --admin-phone 5550100 --admin-password secret
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from catalog_api.application.catalog_engine import CatalogEngine
from catalog_api.application.results import OperationResult
from catalog_api.application.user_service import UserRegistration, UserService
from catalog_api.domain.commands import CategoryDraft, ProductDraft
from catalog_api.domain.entities import ProductStatus
from catalog_api.infrastructure.config import settings
from catalog_api.infrastructure.sql_record_store import SqlAlchemyRecordStore

# (name, parent name, comment)
SAMPLE_CATEGORIES = [
    ("Living Room", None, "Sofas, chairs and tables"),
    ("Sofas", "Living Room", None),
    ("Recliners", "Sofas", "Manual and power recliners"),
    ("Sectionals", "Sofas", None),
    ("Bedroom", None, "Beds and storage"),
    ("Beds", "Bedroom", None),
]

# (name, brand, price, category names, status)
SAMPLE_PRODUCTS = [
    ("Aria Power Recliner", "Northwood", 899.0, ["Recliners"], ProductStatus.ACTIVE),
    ("Corner Sectional", "Northwood", 1499.0, ["Sectionals", "Sofas"], ProductStatus.ACTIVE),
    ("Oak Platform Bed", "Timberline", 749.0, ["Beds"], ProductStatus.ACTIVE),
    ("Discontinued Loveseat", "Northwood", 399.0, ["Sofas"], ProductStatus.INACTIVE),
]


def unwrap(result: OperationResult):
    if not result.success:
        raise RuntimeError(f"{result.error_code}: {result.error} {result.details}")
    return result.value


async def seed(store: SqlAlchemyRecordStore, admin_phone: str, admin_password: str) -> dict:
    """Seed the sample catalog.

    Returns:
        Counts of created records.
    """
    engine = CatalogEngine(store, request_id="seed")
    users = UserService(store, request_id="seed")

    ids: dict[str, str] = {}
    for name, parent, comment in SAMPLE_CATEGORIES:
        node = unwrap(
            await engine.create_category(
                CategoryDraft(name=name, parent_id=ids.get(parent) if parent else None, comment=comment)
            )
        )
        ids[name] = node.id

    for name, brand, price, categories, status in SAMPLE_PRODUCTS:
        unwrap(
            await engine.create_product(
                ProductDraft(
                    name=name,
                    brand=brand,
                    original_price=price,
                    category_ids=[ids[c] for c in categories],
                    status=status,
                )
            )
        )

    unwrap(
        await users.register(
            UserRegistration(name="Admin", phone=admin_phone, password=admin_password)
        )
    )

    return {
        "categories": len(SAMPLE_CATEGORIES),
        "products": len(SAMPLE_PRODUCTS),
        "users": 1,
    }


async def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Seed the catalog database with sample data",
    )
    parser.add_argument(
        "--database-url",
        default=settings.database_url,
        help="Async SQLAlchemy database URL (default: from settings)",
    )
    parser.add_argument(
        "--admin-phone",
        default="5550100",
        help="Phone number of the seeded admin user",
    )
    parser.add_argument(
        "--admin-password",
        default="admin",
        help="Password of the seeded admin user",
    )

    args = parser.parse_args()

    print("=" * 60)
    print("Catalog Seeder")
    print("=" * 60)

    store = SqlAlchemyRecordStore.from_url(args.database_url)
    try:
        print("Creating database tables...")
        await store.create_tables()
        print("Tables ready.")
        print()

        result = await seed(store, args.admin_phone, args.admin_password)
        print(f"  ✓ Categories: {result['categories']}")
        print(f"  ✓ Products: {result['products']}")
        print(f"  ✓ Users: {result['users']}")
    finally:
        await store.close()

    print("=" * 60)
    print("Seeding complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
