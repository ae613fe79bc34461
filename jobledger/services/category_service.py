"""
Category persistence service.

RULES:
1. Every category belongs to exactly one user
2. name is unique per user within a type ('income', 'expense', 'both')
3. The well-known categories used by derived transactions are created on
   demand by CategoryResolver, not here
4. A category still referenced by transactions cannot be deleted
"""

import logging
from typing import Any, Dict, List, Optional

from jobledger.db.store import RecordStore
from jobledger.utils.constants import CATEGORIES_TABLE, CATEGORY_TYPES, TRANSACTIONS_TABLE
from jobledger.utils.errors import ConflictError, ValidationError

logger = logging.getLogger(__name__)


async def get_all_categories(
    store: RecordStore,
    user_id: str,
    category_type: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Fetch the user's categories ordered by name, optionally of one type.
    """
    filters: Dict[str, Any] = {"user_id": user_id}
    if category_type:
        if category_type not in CATEGORY_TYPES:
            raise ValidationError(f"Invalid type: {category_type}")
        filters["type"] = category_type

    categories = (await store.find_where(CATEGORIES_TABLE, filters)).unwrap()
    categories.sort(key=lambda category: str(category.get("name") or "").lower())

    logger.info(f"Fetched {len(categories)} categories for user {user_id}")

    return categories


async def get_category_by_id(
    store: RecordStore,
    user_id: str,
    category_id: str,
) -> Optional[Dict[str, Any]]:
    """
    Fetch a single category by its ID.

    Returns:
        Category record if found and owned by the user, None otherwise
    """
    category = (await store.get_by_id(CATEGORIES_TABLE, category_id)).unwrap()

    if not category or category.get("user_id") != user_id:
        logger.warning(f"Category {category_id} not found or not accessible by user {user_id}")
        return None

    return category


async def create_category(
    store: RecordStore,
    user_id: str,
    name: str,
    category_type: str,
) -> Dict[str, Any]:
    """
    Create a user category.

    Raises:
        ValidationError: If type is invalid or name is blank
        ConflictError: If the user already has a category with this name and type
        StoreError: If the insert fails
    """
    name = name.strip()
    if not name:
        raise ValidationError("name must not be blank")
    if category_type not in CATEGORY_TYPES:
        raise ValidationError(
            f"Invalid type: {category_type}. Must be one of {', '.join(CATEGORY_TYPES)}"
        )

    existing = (
        await store.find_where(
            CATEGORIES_TABLE, {"user_id": user_id, "type": category_type, "name": name}
        )
    ).unwrap()
    if existing:
        raise ConflictError(f"A {category_type} category named '{name}' already exists")

    logger.info(f"Creating category for user {user_id}: type={category_type}")

    created = (
        await store.create(
            CATEGORIES_TABLE, {"user_id": user_id, "name": name, "type": category_type}
        )
    ).unwrap()

    logger.info(f"Category created successfully: id={created.get('id')}, user_id={user_id}")

    return created


async def delete_category(
    store: RecordStore,
    user_id: str,
    category_id: str,
) -> bool:
    """
    Delete a user category that no transaction references.

    Returns:
        True if deleted, False if not found or not accessible

    Raises:
        ConflictError: If transactions still reference the category
    """
    existing = await get_category_by_id(store, user_id, category_id)
    if not existing:
        return False

    in_use = (
        await store.find_where(
            TRANSACTIONS_TABLE, {"user_id": user_id, "category_id": category_id}
        )
    ).unwrap()
    if in_use:
        raise ConflictError(
            f"Category is used by {len(in_use)} transaction(s) and cannot be deleted"
        )

    logger.info(f"Deleting category {category_id} for user {user_id}")

    return (await store.delete(CATEGORIES_TABLE, category_id)).unwrap()
