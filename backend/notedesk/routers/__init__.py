"""
NoteDesk Backend — RPC Routers
================================

What:  Typed procedures grouped by domain, merged into one registry.
Who:   Served over HTTP by notedesk.routes.rpc.

    app_router["profile.get"], app_router["note.create"], ...
"""

from notedesk.routers.base import (
    Procedure,
    ProcedureKind,
    RequestContext,
    Router,
    merge_routers,
)
from notedesk.routers.note import note_router
from notedesk.routers.profile import profile_router

app_router = merge_routers(profile_router, note_router)

__all__ = [
    "Procedure",
    "ProcedureKind",
    "RequestContext",
    "Router",
    "app_router",
    "merge_routers",
]
