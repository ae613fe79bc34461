"""
Supabase client factory.

Clients are built per request from the caller's access token, so every
query the SupabaseRecordStore issues runs under the RLS policies
(user_id = auth.uid()) on jobs, expenses, transactions, categories and
clients. The service_role key is never used here.
"""

import logging

from jobledger.config import settings
from supabase import Client, create_client

logger = logging.getLogger(__name__)


def get_supabase_client(access_token: str) -> Client:
    """
    Create a Supabase client acting as the token's user.

    Args:
        access_token: JWT already verified by get_authenticated_user

    Raises:
        ValueError: If the Supabase project is not configured
            (e.g. the API was started with STORE_BACKEND=memory settings)
    """
    if not settings.SUPABASE_URL or not settings.SUPABASE_PUBLISHABLE_KEY:
        raise ValueError("SUPABASE_URL and SUPABASE_PUBLISHABLE_KEY must be set for the supabase store")

    client: Client = create_client(
        supabase_url=settings.SUPABASE_URL,
        supabase_key=settings.SUPABASE_PUBLISHABLE_KEY
    )
    client.auth.set_session(access_token, access_token)

    logger.debug("Created RLS-scoped Supabase client")

    return client
