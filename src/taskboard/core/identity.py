# src/taskboard/core/identity.py

from __future__ import annotations

"""
Caller identity.

Components never read identity from shared state: the current Identity (or None
for an unauthenticated caller) is passed into every call explicitly.
"""

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Identity:
    email: str
    name: str

    @property
    def is_complete(self) -> bool:
        return bool(self.email and self.email.strip() and self.name and self.name.strip())


class LocalIdentityProvider:
    """
    In-process identity provider for the console front-end.

    The real provider (OAuth) lives outside this project; this one just records
    who signed in so the console can thread that identity into the engines.
    """

    def __init__(self) -> None:
        self._current: Identity | None = None

    def current_identity(self) -> Identity | None:
        return self._current

    def sign_in(self, provider: str = "local", *, email: str = "", name: str = "") -> Identity | None:
        email = (email or "").strip()
        name = (name or "").strip()
        if not email:
            logger.debug("sign_in ignored: empty email (provider=%s)", provider)
            return None

        self._current = Identity(email=email, name=name or email.split("@", 1)[0])
        logger.info("Signed in email=%s provider=%s", email, provider)
        return self._current

    def sign_out(self) -> None:
        if self._current is not None:
            logger.info("Signed out email=%s", self._current.email)
        self._current = None
