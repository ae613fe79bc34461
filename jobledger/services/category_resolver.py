"""
Resolve-or-create the well-known categories derived transactions point at.

Default mode is lookup-then-create: two concurrent first uses for the same
owner can both miss the lookup and both insert, leaving two categories with
the same name. Atomic mode (ATOMIC_CATEGORY_RESOLUTION=true) needs a unique
constraint on categories(user_id, name, type) in the database; a
unique_violation on insert is then resolved by re-reading the winner's row.
"""

import logging
from typing import Optional

from jobledger.db.store import RecordStore
from jobledger.utils.constants import CATEGORIES_TABLE, UNIQUE_VIOLATION
from jobledger.utils.errors import StoreError, ValidationError
from jobledger.utils.result import Err, Ok, Result

logger = logging.getLogger(__name__)


class CategoryResolver:
    """Maps (owner, well-known name, kind) to a category id."""

    def __init__(self, store: RecordStore, atomic: bool = False):
        self.store = store
        self.atomic = atomic

    async def _find(self, user_id: str, name: str, kind: str) -> Result[Optional[str]]:
        result = await self.store.find_where(
            CATEGORIES_TABLE, {"user_id": user_id, "type": kind}
        )
        if isinstance(result, Err):
            return result

        for category in result.value:
            if category.get("name") == name:
                return Ok(str(category["id"]))
        return Ok(None)

    async def resolve(self, user_id: str, name: str, kind: str) -> Result[str]:
        """
        Return the id of the owner's ``name`` category of type ``kind``.

        Creates the category when the owner has none with that exact name.

        Returns:
            Ok(category_id), or Err(ValidationError | StoreError).
        """
        if not user_id:
            return Err(ValidationError("user_id is required to resolve a category"))
        if not name:
            return Err(ValidationError("category name is required"))

        found = await self._find(user_id, name, kind)
        if isinstance(found, Err):
            return found
        if found.value is not None:
            return Ok(found.value)

        logger.info(f"Creating well-known category '{name}' ({kind}) for user {user_id}")
        created = await self.store.create(
            CATEGORIES_TABLE, {"user_id": user_id, "name": name, "type": kind}
        )

        if isinstance(created, Err):
            error = created.error
            if self.atomic and isinstance(error, StoreError) and error.code == UNIQUE_VIOLATION:
                logger.info(f"Category '{name}' created concurrently for user {user_id}, re-reading")
                refetched = await self._find(user_id, name, kind)
                if isinstance(refetched, Ok) and refetched.value is not None:
                    return Ok(refetched.value)
            logger.warning(f"Could not create category '{name}' for user {user_id}: {error.message}")
            return created

        return Ok(str(created.value["id"]))
