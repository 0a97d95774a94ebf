"""
=============================================================================
REQUEST HANDLERS
=============================================================================

Handlers hold the per-route logic. They sit between the dispatcher (which
decides which one runs) and the store gateway (which they call exactly once
per request).

    Dispatcher ──► UserHandlers.get_user(text) ──► UserStore.get_user(id)
                          │
                          └──► HTTPResponse

=============================================================================
"""

from .users import UserHandlers

__all__ = [
    "UserHandlers",
]
