from __future__ import annotations

import asyncio
import logging
from collections import OrderedDict
from dataclasses import dataclass

import httpx

from app.ai.types import AnalysisProvider
from app.core.config import Settings
from app.services.history_coordinator import HistoryCoordinator
from app.services.session_watcher import InMemorySessionWatcher
from app.storage.local_store import LocalStorage, LocalStore
from app.storage.remote_store import RemoteStore

logger = logging.getLogger(__name__)


@dataclass
class BrowserSession:
    session_id: str
    watcher: InMemorySessionWatcher
    coordinator: HistoryCoordinator
    remote_store: RemoteStore | None = None


class SessionRegistry:
    """One coordinator (and local history namespace) per browser session id."""

    def __init__(
        self,
        *,
        provider: AnalysisProvider,
        local_storage: LocalStorage,
        remote_client: httpx.AsyncClient | None = None,
        supabase_url: str | None = None,
        supabase_anon_key: str | None = None,
        score_policy: str = "trust",
        score_tolerance: float = 1.0,
        local_history_max_records: int = 100,
        max_sessions: int = 1000,
    ):
        self._provider = provider
        self._local_storage = local_storage
        self._remote_client = remote_client
        self._supabase_url = supabase_url
        self._supabase_anon_key = supabase_anon_key
        self._score_policy = score_policy
        self._score_tolerance = score_tolerance
        self._local_history_max_records = local_history_max_records
        self._max_sessions = max(1, max_sessions)
        self._sessions: OrderedDict[str, BrowserSession] = OrderedDict()
        self._lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: Settings, provider: AnalysisProvider) -> "SessionRegistry":
        remote_client = None
        if settings.remote_store_configured:
            remote_client = httpx.AsyncClient(timeout=settings.remote_timeout_s)
        else:
            logger.warning("remote_store_not_configured running in local-only mode")
        return cls(
            provider=provider,
            local_storage=LocalStorage(settings.local_store_db_path),
            remote_client=remote_client,
            supabase_url=settings.supabase_url,
            supabase_anon_key=settings.supabase_anon_key,
            score_policy=settings.score_policy,
            score_tolerance=settings.score_tolerance,
            local_history_max_records=settings.local_history_max_records,
        )

    @property
    def remote_enabled(self) -> bool:
        return bool(self._remote_client is not None and self._supabase_url and self._supabase_anon_key)

    def _build(self, session_id: str) -> BrowserSession:
        watcher = InMemorySessionWatcher()
        remote_store = None
        if self.remote_enabled:
            remote_store = RemoteStore(
                self._remote_client,
                base_url=self._supabase_url,
                anon_key=self._supabase_anon_key,
            )
        coordinator = HistoryCoordinator(
            provider=self._provider,
            local_store=LocalStore(
                self._local_storage,
                namespace=session_id,
                max_records=self._local_history_max_records,
            ),
            remote_store=remote_store,
            session_watcher=watcher,
            score_policy=self._score_policy,
            score_tolerance=self._score_tolerance,
        )
        return BrowserSession(
            session_id=session_id,
            watcher=watcher,
            coordinator=coordinator,
            remote_store=remote_store,
        )

    async def get(self, session_id: str) -> BrowserSession:
        async with self._lock:
            session = self._sessions.get(session_id)
            if session is not None:
                self._sessions.move_to_end(session_id)
                return session

            session = self._build(session_id)
            await session.coordinator.start()
            self._sessions[session_id] = session
            while len(self._sessions) > self._max_sessions:
                _, evicted = self._sessions.popitem(last=False)
                await evicted.coordinator.close()
            return session

    async def close(self) -> None:
        async with self._lock:
            for session in self._sessions.values():
                await session.coordinator.close()
            self._sessions.clear()
        if self._remote_client is not None:
            await self._remote_client.aclose()
        self._local_storage.close()
