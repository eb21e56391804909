"""
NoteDesk Backend — Note Procedures
====================================

    note.list    query     → [NoteResponse], newest first
    note.get     query     {id} → NoteResponse
    note.create  mutation  {title, content?} → NoteResponse
    note.update  mutation  {id, title?, content?} → NoteResponse
    note.delete  mutation  {id} → {success: true}
"""

from typing import List

from notedesk.routers.base import RequestContext, Router
from notedesk.schemas.note import (
    DeleteResponse,
    NoteCreateInput,
    NoteIdInput,
    NoteResponse,
    NoteUpdateInput,
)

note_router = Router("note")


@note_router.query("list", output=List[NoteResponse])
async def list_notes(ctx: RequestContext):
    return await ctx.notes.list()


@note_router.query("get", input=NoteIdInput, output=NoteResponse)
async def get_note(ctx: RequestContext, input: NoteIdInput):
    return await ctx.notes.get(input.id)


@note_router.mutation("create", input=NoteCreateInput, output=NoteResponse)
async def create_note(ctx: RequestContext, input: NoteCreateInput):
    return await ctx.notes.create(title=input.title, content=input.content)


@note_router.mutation("update", input=NoteUpdateInput, output=NoteResponse)
async def update_note(ctx: RequestContext, input: NoteUpdateInput):
    return await ctx.notes.update(input.id, input.changes())


@note_router.mutation("delete", input=NoteIdInput, output=DeleteResponse)
async def delete_note(ctx: RequestContext, input: NoteIdInput):
    return await ctx.notes.delete(input.id)
