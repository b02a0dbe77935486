"""
Database Module - Supabase client

Provides a cached async Supabase client used for both the profile
table (document store) and Supabase Auth (identity provider).
"""

import os
from typing import Optional

from supabase._async.client import AsyncClient, create_client as acreate_client

SUPABASE_URL = os.environ.get("SUPABASE_URL", "")
# Client-side app: the anon key plus row-level security, never the service role
SUPABASE_ANON_KEY = os.environ.get("SUPABASE_ANON_KEY", "")


_async_supabase_client: Optional[AsyncClient] = None


async def get_supabase() -> AsyncClient:
    """
    Get async Supabase client (created on first use).

    Raises:
        ValueError: SUPABASE_URL or SUPABASE_ANON_KEY is not set
    """
    global _async_supabase_client

    if _async_supabase_client is None:
        if not SUPABASE_URL or not SUPABASE_ANON_KEY:
            raise ValueError("SUPABASE_URL and SUPABASE_ANON_KEY must be set")
        _async_supabase_client = await acreate_client(SUPABASE_URL, SUPABASE_ANON_KEY)

    return _async_supabase_client


def reset_supabase_client() -> None:
    """Drop the cached client (used on teardown and in tests)."""
    global _async_supabase_client
    _async_supabase_client = None
