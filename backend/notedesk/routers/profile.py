"""
NoteDesk Backend — Profile Procedures
=======================================

    profile.get     query     → ProfileResponse
    profile.update  mutation  {name, timezone} → ProfileResponse
"""

from notedesk.routers.base import RequestContext, Router
from notedesk.schemas.profile import ProfileResponse, ProfileUpdateInput

profile_router = Router("profile")


@profile_router.query("get", output=ProfileResponse)
async def get_profile(ctx: RequestContext):
    return await ctx.profiles.get()


@profile_router.mutation("update", input=ProfileUpdateInput, output=ProfileResponse)
async def update_profile(ctx: RequestContext, input: ProfileUpdateInput):
    return await ctx.profiles.update(input.model_dump())
