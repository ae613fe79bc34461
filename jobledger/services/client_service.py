"""
Client persistence service (the customers jobs are done for).
"""

import logging
from typing import Any, Dict, List, Optional

from jobledger.db.store import RecordStore
from jobledger.utils.constants import CLIENTS_TABLE
from jobledger.utils.errors import ValidationError

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = ("name", "phone", "email", "address", "notes")


async def create_client(
    store: RecordStore,
    user_id: str,
    name: str,
    phone: Optional[str] = None,
    email: Optional[str] = None,
    address: Optional[str] = None,
    notes: Optional[str] = None,
) -> Dict[str, Any]:
    if not name or not name.strip():
        raise ValidationError("name must not be blank")

    client_data = {
        "user_id": user_id,
        "name": name.strip(),
        "phone": phone,
        "email": email,
        "address": address,
        "notes": notes,
    }

    created = (await store.create(CLIENTS_TABLE, client_data)).unwrap()
    logger.info(f"Client created successfully: id={created.get('id')}, user_id={user_id}")
    return created


async def get_user_clients(store: RecordStore, user_id: str) -> List[Dict[str, Any]]:
    clients = (await store.find_where(CLIENTS_TABLE, {"user_id": user_id})).unwrap()
    clients.sort(key=lambda client: str(client.get("name") or "").lower())
    return clients


async def get_client_by_id(
    store: RecordStore,
    user_id: str,
    client_id: str,
) -> Optional[Dict[str, Any]]:
    client = (await store.get_by_id(CLIENTS_TABLE, client_id)).unwrap()
    if not client or client.get("user_id") != user_id:
        logger.warning(f"Client {client_id} not found or not accessible by user {user_id}")
        return None
    return client


async def update_client(
    store: RecordStore,
    user_id: str,
    client_id: str,
    **changes: Optional[str],
) -> Optional[Dict[str, Any]]:
    """Update the provided contact fields; unknown fields are rejected."""
    existing = await get_client_by_id(store, user_id, client_id)
    if not existing:
        return None

    unknown = set(changes) - set(_EDITABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown client fields: {', '.join(sorted(unknown))}")

    update_data = {key: value for key, value in changes.items() if value is not None}
    if "name" in update_data and not str(update_data["name"]).strip():
        raise ValidationError("name must not be blank")
    if not update_data:
        return existing

    return (await store.update(CLIENTS_TABLE, client_id, update_data)).unwrap()


async def delete_client(store: RecordStore, user_id: str, client_id: str) -> bool:
    existing = await get_client_by_id(store, user_id, client_id)
    if not existing:
        return False

    logger.info(f"Deleting client {client_id} for user {user_id}")
    return (await store.delete(CLIENTS_TABLE, client_id)).unwrap()
