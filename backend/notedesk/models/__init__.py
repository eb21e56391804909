# Models package init
from notedesk.models.note import Note
from notedesk.models.profile import Profile

__all__ = ["Note", "Profile"]
