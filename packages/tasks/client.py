"""Supabase async client construction."""

from __future__ import annotations

from typing import Optional

from supabase import AsyncClient, acreate_client

from .config import get_supabase_key, get_supabase_url


async def create_supabase_client(url: Optional[str] = None, key: Optional[str] = None) -> AsyncClient:
    """Create a client from explicit credentials, falling back to configuration."""
    return await acreate_client(url or get_supabase_url(), key or get_supabase_key())
