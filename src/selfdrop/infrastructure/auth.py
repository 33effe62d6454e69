"""Authenticator for the command line: the identity is given as an option."""

from __future__ import annotations

from selfdrop.domain.model.actor import Actor, Role
from selfdrop.domain.port.authenticator import Authenticator


class StaticAuthenticator(Authenticator):

    def __init__(self, user_id: str, role: Role) -> None:
        self._actor = Actor(user_id=user_id, role=role)

    def current_actor(self) -> Actor:
        return self._actor
