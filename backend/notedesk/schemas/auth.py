"""
NoteDesk Backend — Auth Schemas
=================================

What:  Identity and token shapes exchanged with the hosted auth provider,
       plus the sign-in/sign-up/password-reset request bodies.
"""

import uuid
from typing import Optional

from pydantic import BaseModel, Field


class AuthUser(BaseModel):
    """The verified identity of the caller. `id` is the owner identifier."""
    id: uuid.UUID
    email: Optional[str] = None

    model_config = {"frozen": True}


class AuthSession(BaseModel):
    """Token pair issued by the provider on sign-in or refresh."""
    access_token: str
    refresh_token: str
    expires_in: Optional[int] = None
    user: AuthUser


class SignInRequest(BaseModel):
    email: str = Field(min_length=3, max_length=320)
    password: str = Field(min_length=1)


class SignUpRequest(BaseModel):
    email: str = Field(min_length=3, max_length=320)
    password: str = Field(min_length=6, description="The provider's minimum is 6 characters")
    name: Optional[str] = Field(default=None, max_length=200)


class PasswordResetRequest(BaseModel):
    email: str = Field(min_length=3, max_length=320)


class SessionResponse(BaseModel):
    """Body returned by sign-in/sign-up; tokens travel only in cookies."""
    user: Optional[AuthUser] = None
    message: str = "ok"
