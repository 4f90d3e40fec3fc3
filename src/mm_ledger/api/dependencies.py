"""FastAPI dependency returning the app-owned ReadCache."""

from fastapi import Request

from src.mm_ledger.domain.cache import ReadCache


def get_read_cache(request: Request) -> ReadCache:
    """The instance built in the lifespan and stored on app.state."""
    cache: ReadCache = request.app.state.read_cache
    return cache
