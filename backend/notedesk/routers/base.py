"""
NoteDesk Backend — Typed RPC Procedures
=========================================

What:  The small procedure framework the profile and note routers are built on.
How:   A Router collects async handlers registered with @router.query() or
       @router.mutation(), each with an optional Pydantic input model and an
       output type. merge_routers() flattens groups into "group.name" paths.

Procedure.call(ctx, raw_input) runs, in order:
    1. auth check      → UnauthorizedError before anything else runs
    2. input schema    → ValidationError with per-field messages, before storage
    3. handler         → repositories bound to ctx.user; their errors propagate
    4. output schema   → JSON-ready data

RequestContext is built per request and passed explicitly; nothing about
the caller lives in module state.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from notedesk.exceptions import UnauthorizedError, ValidationError
from notedesk.repositories import NoteRepository, ProfileRepository
from notedesk.schemas.auth import AuthUser

logger = logging.getLogger(__name__)


class ProcedureKind(str, enum.Enum):
    QUERY = "query"
    MUTATION = "mutation"


@dataclass
class RequestContext:
    """Request-scoped handles: the DB session and the verified identity (if any)."""

    db: AsyncSession
    user: Optional[AuthUser] = None

    def require_user(self) -> AuthUser:
        if self.user is None:
            raise UnauthorizedError()
        return self.user

    @property
    def profiles(self) -> ProfileRepository:
        return ProfileRepository(self.db, self.require_user())

    @property
    def notes(self) -> NoteRepository:
        return NoteRepository(self.db, self.require_user())


Handler = Callable[..., Awaitable[Any]]


def flatten_validation_errors(exc: PydanticValidationError) -> Dict[str, List[str]]:
    """Pydantic errors → {"field": ["message", ...]}; whole-input errors go under "_input"."""
    fields: Dict[str, List[str]] = {}
    for error in exc.errors():
        loc = ".".join(str(part) for part in error["loc"]) or "_input"
        fields.setdefault(loc, []).append(error["msg"])
    return fields


class Procedure:

    def __init__(
        self,
        name: str,
        kind: ProcedureKind,
        handler: Handler,
        input_model: Optional[Type[BaseModel]] = None,
        output: Any = None,
        protected: bool = True,
    ):
        self.name = name
        self.kind = kind
        self.handler = handler
        self.input_model = input_model
        self.protected = protected
        self._output_adapter = TypeAdapter(output) if output is not None else None

    def parse_input(self, raw_input: Any) -> Optional[BaseModel]:
        if self.input_model is None:
            return None
        try:
            return self.input_model.model_validate(raw_input)
        except PydanticValidationError as e:
            raise ValidationError(
                message=f"Invalid input for {self.name}",
                field_errors=flatten_validation_errors(e),
            )

    def serialize(self, result: Any) -> Any:
        if self._output_adapter is None:
            return result
        value = self._output_adapter.validate_python(result, from_attributes=True)
        return self._output_adapter.dump_python(value, mode="json")

    async def call(self, ctx: RequestContext, raw_input: Any = None) -> Any:
        if self.protected:
            ctx.require_user()

        data = self.parse_input(raw_input)
        if self.input_model is None:
            result = await self.handler(ctx)
        else:
            result = await self.handler(ctx, data)
        return self.serialize(result)


class Router:
    """
    A named group of procedures.

    Usage:
        note = Router("note")

        @note.query("get", input=NoteIdInput, output=NoteResponse)
        async def get_note(ctx, input): ...
    """

    def __init__(self, name: str):
        self.name = name
        self.procedures: Dict[str, Procedure] = {}

    def _register(
        self,
        kind: ProcedureKind,
        name: Optional[str],
        input: Optional[Type[BaseModel]],
        output: Any,
        protected: bool,
    ) -> Callable[[Handler], Handler]:
        def decorator(handler: Handler) -> Handler:
            short_name = name or handler.__name__
            self.procedures[short_name] = Procedure(
                name=f"{self.name}.{short_name}",
                kind=kind,
                handler=handler,
                input_model=input,
                output=output,
                protected=protected,
            )
            return handler
        return decorator

    def query(self, name=None, input=None, output=None, protected: bool = True):
        return self._register(ProcedureKind.QUERY, name, input, output, protected)

    def mutation(self, name=None, input=None, output=None, protected: bool = True):
        return self._register(ProcedureKind.MUTATION, name, input, output, protected)


def merge_routers(*routers: Router) -> Dict[str, Procedure]:
    """Flat registry keyed by "group.procedure"."""
    registry: Dict[str, Procedure] = {}
    for router in routers:
        for procedure in router.procedures.values():
            if procedure.name in registry:
                raise ValueError(f"Duplicate procedure path: {procedure.name}")
            registry[procedure.name] = procedure
    return registry
