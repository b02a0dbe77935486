"""Domain services built on the profile gateway."""
from .profile import ProfileService

__all__ = ["ProfileService"]
