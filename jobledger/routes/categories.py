"""
Category API endpoints.

Categories are per-user labels for transactions. The two categories used by
derived transactions are created on demand by the synchronizer and show up
here like any other.
"""

import logging
from typing import Annotated, Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status

from jobledger.auth.dependencies import AuthenticatedUser, get_authenticated_user
from jobledger.db import get_record_store
from jobledger.routes.errors import ledger_http_exception, not_found, unexpected_error
from jobledger.schemas.categories import (
    CategoryCreateRequest,
    CategoryCreateResponse,
    CategoryDeleteResponse,
    CategoryListResponse,
    CategoryResponse,
)
from jobledger.services import (
    create_category,
    delete_category,
    get_all_categories,
    get_category_by_id,
)
from jobledger.utils.errors import LedgerError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/categories", tags=["categories"])


def _to_category_response(category: Dict[str, Any]) -> CategoryResponse:
    return CategoryResponse(
        id=str(category.get("id")),
        user_id=str(category.get("user_id")),
        name=str(category.get("name")),
        type=category.get("type"),
        created_at=category.get("created_at"),
        updated_at=category.get("updated_at"),
    )


@router.get(
    "",
    response_model=CategoryListResponse,
    status_code=status.HTTP_200_OK,
    summary="List user's categories",
)
async def list_categories(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    category_type: Optional[str] = Query(None, alias="type", description="Filter by type"),
) -> CategoryListResponse:
    logger.info(f"Listing categories for user {auth_user.user_id} (type={category_type})")

    store = get_record_store(auth_user.access_token)

    try:
        categories = await get_all_categories(store, auth_user.user_id, category_type)
    except LedgerError as e:
        raise ledger_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to fetch categories: {e}", exc_info=True)
        raise unexpected_error("fetch_error", "Failed to retrieve categories from database")

    category_responses = [_to_category_response(category) for category in categories]
    return CategoryListResponse(categories=category_responses, count=len(category_responses))


@router.post(
    "",
    response_model=CategoryCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a category",
    description="Create a category. Returns 409 if the user already has one with this name and type.",
)
async def create_category_record(
    request: CategoryCreateRequest,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> CategoryCreateResponse:
    store = get_record_store(auth_user.access_token)

    try:
        created = await create_category(store, auth_user.user_id, request.name, request.type)
    except LedgerError as e:
        raise ledger_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to create category: {e}", exc_info=True)
        raise unexpected_error("persistence_error", "Failed to save category to database")

    return CategoryCreateResponse(
        status="CREATED",
        category=_to_category_response(created),
        message="Category created successfully"
    )


@router.get(
    "/{category_id}",
    response_model=CategoryResponse,
    status_code=status.HTTP_200_OK,
    summary="Get category details",
)
async def get_category(
    category_id: str,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> CategoryResponse:
    store = get_record_store(auth_user.access_token)

    try:
        category = await get_category_by_id(store, auth_user.user_id, category_id)
    except LedgerError as e:
        raise ledger_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to fetch category {category_id}: {e}", exc_info=True)
        raise unexpected_error("fetch_error", "Failed to retrieve category from database")

    if not category:
        raise not_found("Category", category_id)

    return _to_category_response(category)


@router.delete(
    "/{category_id}",
    response_model=CategoryDeleteResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete a category",
    description="Delete a category. Returns 409 while transactions still reference it.",
)
async def delete_category_record(
    category_id: str,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> CategoryDeleteResponse:
    store = get_record_store(auth_user.access_token)

    try:
        deleted = await delete_category(store, auth_user.user_id, category_id)
    except LedgerError as e:
        raise ledger_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to delete category {category_id}: {e}", exc_info=True)
        raise unexpected_error("delete_error", "Failed to delete category")

    if not deleted:
        raise not_found("Category", category_id)

    return CategoryDeleteResponse(
        status="DELETED",
        category_id=category_id,
        message="Category deleted successfully"
    )
