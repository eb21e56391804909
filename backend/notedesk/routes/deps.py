"""
NoteDesk Backend — Route Dependencies
=======================================

What:  Builds the request-scoped RequestContext handed to RPC procedures
       and page handlers.
How:   Combines the per-request DB session with the identity the
       RouteGuardMiddleware resolved onto `request.state.user`.
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from notedesk.database import get_db_session
from notedesk.routers import RequestContext


async def get_request_context(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> RequestContext:
    return RequestContext(db=db, user=getattr(request.state, "user", None))
