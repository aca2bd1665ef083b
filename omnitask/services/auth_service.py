"""
Auth Service — mock sign-in for the local dashboard.

There are no passwords: signing in just records who is using the app so the
background scheduler knows when a user session starts and ends.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Optional

from omnitask.data.models import User
from omnitask.services.app_state import AppState

logger = logging.getLogger(__name__)

PROFILE_FIELDS = {"name", "email", "phone", "avatar"}


class AuthService:
    def __init__(self, state: AppState) -> None:
        self.state = state

    @property
    def current_user(self) -> Optional[User]:
        return self.state.user

    @property
    def is_logged_in(self) -> bool:
        return self.state.user is not None

    def login(self, name: str, email: Optional[str] = None) -> User:
        name = name.strip()
        if not name:
            raise ValueError("Please enter your name.")
        if self.is_logged_in:
            raise RuntimeError("A user is already signed in.")
        user = User(name=name, email=(email or "").strip() or None)
        self.state.set_user(user)
        logger.info("User signed in: %s", user.name)
        return user

    def update_profile(self, **changes) -> User:
        user = self.state.user
        if user is None:
            raise RuntimeError("No user is signed in.")
        bad = set(changes) - PROFILE_FIELDS
        if bad:
            raise ValueError(f"Unknown profile field(s): {', '.join(sorted(bad))}")
        updated = dataclasses.replace(user, **changes)
        self.state.set_user(updated)
        return updated

    def logout(self) -> None:
        user = self.state.user
        self.state.set_user(None)
        if user:
            logger.info("User signed out: %s", user.name)
