from functools import lru_cache

from supabase import Client, create_client

from app.core.config import get_settings


@lru_cache
def _create_client(url: str, key: str) -> Client:
    return create_client(url, key)


def get_supabase() -> Client:
    """FastAPI dependency returning the shared Supabase client."""
    settings = get_settings()
    return _create_client(settings.supabase_url, settings.supabase_service_key)
