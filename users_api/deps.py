from fastapi import Request

from .store import UserStore


def get_store(request: Request) -> UserStore:
    """Return the store the application was built with."""
    return request.app.state.store
