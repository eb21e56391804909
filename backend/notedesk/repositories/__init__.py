"""
NoteDesk Backend — Data Access Layer
======================================

Repositories are owner-scoped: each one is built from a database session
and the verified AuthUser, and every statement it issues filters on that
user's id. No repository method takes an owner argument.

    - ProfileRepository: get / update of the caller's profile row
    - NoteRepository:    list / get / create / update / delete of the caller's notes
"""

from notedesk.repositories.note_repository import NoteRepository
from notedesk.repositories.profile_repository import ProfileRepository

__all__ = ["NoteRepository", "ProfileRepository"]
