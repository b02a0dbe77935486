"""Profile models - Pydantic models for the per-user document."""
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Identity(BaseModel):
    """Authenticated identity handed over by the identity provider."""
    model_config = ConfigDict(frozen=True)

    id: str
    display_name: str = ""
    email: str = ""
    photo_ref: str = ""


class ScanSummary(BaseModel):
    """Opaque body-scan metadata produced by the scan flow."""
    model_config = ConfigDict(extra="ignore")

    scan_id: Optional[str] = None
    height: Optional[float] = None
    weight: Optional[float] = None
    image_ref: Optional[str] = None
    device: Optional[str] = None  # mobile | desktop
    try_on_count: int = 0
    captured_at: Optional[datetime] = None


class UserProfile(BaseModel):
    """Per-user profile document. Created once on first sign-in."""
    model_config = ConfigDict(extra="ignore")  # Ignore unknown columns from DB

    user_id: str
    display_name: str = ""
    email: str = ""
    photo_ref: str = ""
    cart: list[dict[str, Any]] = Field(default_factory=list)
    recent_searches: list[str] = Field(default_factory=list)
    scan_summary: Optional[ScanSummary] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    is_privileged: bool = False

    @field_validator("cart", "recent_searches", mode="before")
    @classmethod
    def null_to_empty(cls, v):
        return v or []

    @field_validator("display_name", "email", "photo_ref", mode="before")
    @classmethod
    def null_to_blank(cls, v):
        return v or ""

    @classmethod
    def new_for(cls, identity: Identity) -> "UserProfile":
        """Fresh profile for a first sign-in: empty cart and history, not privileged."""
        return cls(
            user_id=identity.id,
            display_name=identity.display_name,
            email=identity.email,
            photo_ref=identity.photo_ref,
        )
