"""Re-export individual schema modules for easy imports."""

from .user import RegisterUserParams, RevokeUserParams
from .entry import (
    AddEntryParams,
    DeleteEntryParams,
    EntryOut,
    ListEntriesParams,
    UpdateEntryParams,
)
from .profile import (
    GetProfileParams,
    ProfileHistoryParams,
    ProfileOut,
    TrackingOut,
    UpdateProfileParams,
)

__all__ = [
    "RegisterUserParams",
    "RevokeUserParams",
    "AddEntryParams",
    "DeleteEntryParams",
    "EntryOut",
    "ListEntriesParams",
    "UpdateEntryParams",
    "GetProfileParams",
    "ProfileHistoryParams",
    "ProfileOut",
    "TrackingOut",
    "UpdateProfileParams",
]
