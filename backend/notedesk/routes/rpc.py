"""
NoteDesk Backend — RPC Transport
==================================

What:  Serves the typed procedures in `app_router` over HTTP.
How:   Queries are GET requests with JSON input in the `input` query
       parameter; mutations are POST requests with a JSON body.

    GET  /api/rpc/note.get?input={"id":"6f1c..."}
    POST /api/rpc/note.create   {"title": "Groceries", "content": "eggs"}

Success envelope:
    {"result": {"data": <procedure output>}}

Errors (unauthorized, validation_error, not_found, server_error) are raised
by the procedures and rendered by the global exception handlers; nothing
is retried or rewritten here.
"""

import json
import logging
from typing import Any, Optional, Union

from fastapi import APIRouter, Depends, Query, Request

from notedesk.exceptions import MethodNotAllowedError, NotFoundError, ValidationError
from notedesk.routers import Procedure, ProcedureKind, RequestContext, app_router
from notedesk.routes.deps import get_request_context

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/rpc", tags=["RPC"])


def _lookup(path: str, kind: ProcedureKind) -> Procedure:
    procedure = app_router.get(path)
    if procedure is None:
        raise NotFoundError(resource="procedure", resource_id=path)
    if procedure.kind is not kind:
        raise MethodNotAllowedError(path, procedure.kind.value)
    return procedure


def _decode_input(raw: Union[str, bytes, None]) -> Any:
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError as e:
        raise ValidationError(
            message="Input is not valid JSON",
            field_errors={"_input": [str(e)]},
        )


@router.get(
    "/{path}",
    summary="Run an RPC query",
    description="Side-effect-free procedures: profile.get, note.list, note.get.",
)
async def run_query(
    path: str,
    input: Optional[str] = Query(default=None, description="JSON-encoded procedure input"),
    ctx: RequestContext = Depends(get_request_context),
) -> dict:
    procedure = _lookup(path, ProcedureKind.QUERY)
    data = await procedure.call(ctx, _decode_input(input))
    return {"result": {"data": data}}


@router.post(
    "/{path}",
    summary="Run an RPC mutation",
    description="Mutating procedures: profile.update, note.create, note.update, note.delete.",
)
async def run_mutation(
    path: str,
    request: Request,
    ctx: RequestContext = Depends(get_request_context),
) -> dict:
    procedure = _lookup(path, ProcedureKind.MUTATION)
    body = await request.body()
    data = await procedure.call(ctx, _decode_input(body))
    logger.debug("Mutation %s completed", path)
    return {"result": {"data": data}}
