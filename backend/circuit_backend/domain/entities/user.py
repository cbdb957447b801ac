"""Domain entities for application users and verified identities."""

from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass
class User:
    """A registered user. ``id`` is the identity provider's UID."""

    id: str
    email: str
    display_name: str = ""
    photo_url: str = ""
    provider: str = "google"
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    last_login_at: datetime | None = None

    def update_profile(
        self,
        display_name: str | None = None,
        photo_url: str | None = None,
    ) -> None:
        """Update mutable profile fields and refresh the updated_at timestamp."""
        if display_name is not None:
            self.display_name = display_name
        if photo_url is not None:
            self.photo_url = photo_url
        self.updated_at = datetime.now(timezone.utc)

    def touch_login(self) -> None:
        now = datetime.now(timezone.utc)
        self.last_login_at = now
        self.updated_at = now


@dataclass
class VerifiedIdentity:
    """Caller identity as confirmed by the external identity provider."""

    uid: str
    email: str = ""
    display_name: str = ""
    photo_url: str = ""
    provider: str = ""
