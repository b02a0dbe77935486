"""
Profile persistence.

- ProfileGateway: contract every backend implements (get / set / update)
- SupabaseProfileGateway: Supabase table implementation
"""
from .base import ProfileGateway
from .profile_repo import SupabaseProfileGateway, profile_to_row, row_to_profile

__all__ = [
    "ProfileGateway",
    "SupabaseProfileGateway",
    "profile_to_row",
    "row_to_profile",
]
