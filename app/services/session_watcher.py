from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    user_id: str | None = None
    access_token: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.user_id)

    @property
    def label(self) -> str:
        return f"authenticated({self.user_id})" if self.user_id else "anonymous"


ANONYMOUS = Identity()

SessionCallback = Callable[[Identity], Awaitable[None]]


class Subscription(Protocol):
    def unsubscribe(self) -> None: ...


class SessionWatcher(Protocol):
    """Auth state source: answers the startup session check and pushes transitions."""

    async def current_identity(self) -> Identity: ...

    def subscribe(self, callback: SessionCallback) -> Subscription: ...


class _CallbackSubscription:
    def __init__(self, watcher: "InMemorySessionWatcher", callback: SessionCallback):
        self._watcher = watcher
        self._callback = callback
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self.active = False
            self._watcher._discard(self._callback)


class InMemorySessionWatcher:
    """Process-local auth state for one browser session, fed by the session endpoints."""

    def __init__(self, identity: Identity = ANONYMOUS):
        self._identity = identity
        self._callbacks: list[SessionCallback] = []

    @property
    def identity(self) -> Identity:
        return self._identity

    @property
    def subscriber_count(self) -> int:
        return len(self._callbacks)

    async def current_identity(self) -> Identity:
        return self._identity

    def subscribe(self, callback: SessionCallback) -> Subscription:
        self._callbacks.append(callback)
        return _CallbackSubscription(self, callback)

    def _discard(self, callback: SessionCallback) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    async def _publish(self, identity: Identity) -> None:
        self._identity = identity
        logger.info("session_changed identity=%s", identity.label)
        for callback in list(self._callbacks):
            await callback(identity)

    async def sign_in(self, user_id: str, access_token: str | None = None) -> None:
        await self._publish(Identity(user_id=user_id, access_token=access_token))

    async def sign_out(self) -> None:
        await self._publish(ANONYMOUS)
