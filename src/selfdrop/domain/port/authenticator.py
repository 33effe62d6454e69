"""Port for the external identity provider."""

from __future__ import annotations

from abc import ABC, abstractmethod

from selfdrop.domain.model.actor import Actor


class Authenticator(ABC):

    @abstractmethod
    def current_actor(self) -> Actor:
        """Return the authenticated user of the current session."""
