"""User profile store."""

from dataclasses import dataclass
from typing import Protocol

from food_diary.domain.profile import UserProfile


class ProfileRepository(Protocol):
    """Persistence interface for the singleton profile."""

    def load_profile(self) -> UserProfile | None:
        """Return the stored profile, if present."""

    def save_profile(self, profile: UserProfile) -> None:
        """Overwrite the stored profile."""


@dataclass
class ProfileService:
    """Application service for the user profile."""

    repository: ProfileRepository

    def get_profile(self) -> UserProfile:
        """Return the stored profile or an empty one."""
        return self.repository.load_profile() or UserProfile()

    def save_profile(self, profile: UserProfile) -> UserProfile:
        """Replace the stored profile wholesale."""
        self.repository.save_profile(profile)
        return profile
