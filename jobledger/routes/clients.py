"""
Client API endpoints (the customers jobs are done for).
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from jobledger.auth.dependencies import AuthenticatedUser, get_authenticated_user
from jobledger.db import get_record_store
from jobledger.routes.errors import ledger_http_exception, not_found, unexpected_error
from jobledger.schemas.clients import (
    ClientCreateRequest,
    ClientDeleteResponse,
    ClientListResponse,
    ClientResponse,
    ClientUpdateRequest,
)
from jobledger.services import (
    create_client,
    delete_client,
    get_client_by_id,
    get_user_clients,
    update_client,
)
from jobledger.utils.errors import LedgerError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/clients", tags=["clients"])


@router.post(
    "",
    response_model=ClientResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a client",
)
async def create_client_record(
    request: ClientCreateRequest,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> ClientResponse:
    store = get_record_store(auth_user.access_token)

    try:
        created = await create_client(store, auth_user.user_id, **request.model_dump())
    except LedgerError as e:
        raise ledger_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to create client: {e}", exc_info=True)
        raise unexpected_error("persistence_error", "Failed to save client to database")

    return ClientResponse(**created)


@router.get(
    "",
    response_model=ClientListResponse,
    status_code=status.HTTP_200_OK,
    summary="List user's clients",
)
async def list_clients(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> ClientListResponse:
    store = get_record_store(auth_user.access_token)

    try:
        clients = await get_user_clients(store, auth_user.user_id)
    except LedgerError as e:
        raise ledger_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to fetch clients: {e}", exc_info=True)
        raise unexpected_error("fetch_error", "Failed to retrieve clients from database")

    client_responses = [ClientResponse(**client) for client in clients]
    return ClientListResponse(clients=client_responses, count=len(client_responses))


@router.get(
    "/{client_id}",
    response_model=ClientResponse,
    status_code=status.HTTP_200_OK,
    summary="Get client details",
)
async def get_client(
    client_id: str,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> ClientResponse:
    store = get_record_store(auth_user.access_token)

    try:
        client = await get_client_by_id(store, auth_user.user_id, client_id)
    except LedgerError as e:
        raise ledger_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to fetch client {client_id}: {e}", exc_info=True)
        raise unexpected_error("fetch_error", "Failed to retrieve client from database")

    if not client:
        raise not_found("Client", client_id)

    return ClientResponse(**client)


@router.patch(
    "/{client_id}",
    response_model=ClientResponse,
    status_code=status.HTTP_200_OK,
    summary="Update a client",
)
async def update_client_record(
    client_id: str,
    request: ClientUpdateRequest,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> ClientResponse:
    updates = request.model_dump(exclude_none=True)
    if not updates:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "invalid_request",
                "details": "At least one field must be provided for update"
            }
        )

    store = get_record_store(auth_user.access_token)

    try:
        updated = await update_client(store, auth_user.user_id, client_id, **updates)
    except LedgerError as e:
        raise ledger_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to update client {client_id}: {e}", exc_info=True)
        raise unexpected_error("update_error", "Failed to update client")

    if not updated:
        raise not_found("Client", client_id)

    return ClientResponse(**updated)


@router.delete(
    "/{client_id}",
    response_model=ClientDeleteResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete a client",
)
async def delete_client_record(
    client_id: str,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> ClientDeleteResponse:
    store = get_record_store(auth_user.access_token)

    try:
        deleted = await delete_client(store, auth_user.user_id, client_id)
    except LedgerError as e:
        raise ledger_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to delete client {client_id}: {e}", exc_info=True)
        raise unexpected_error("delete_error", "Failed to delete client")

    if not deleted:
        raise not_found("Client", client_id)

    return ClientDeleteResponse(
        status="DELETED",
        client_id=client_id,
        message="Client deleted successfully"
    )
