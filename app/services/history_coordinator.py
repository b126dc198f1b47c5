from __future__ import annotations

import logging

from app.ai import AnalysisProvider, analyze_resume
from app.core.errors import InputError, StoreError
from app.schemas.analysis import StoredAnalysis, Weights
from app.scoring import POLICY_TRUST, apply_score_policy
from app.services.history_state import (
    HistoryState,
    cleared,
    enter_identity,
    with_current,
    with_history,
    with_new_record,
    with_replaced_record,
    with_selected,
    without_record,
)
from app.services.session_watcher import ANONYMOUS, Identity, SessionWatcher, Subscription
from app.storage.types import (
    AccountRecordStore,
    AnalysisContext,
    ClearableRecordStore,
    new_record_id,
    utc_timestamp,
)

logger = logging.getLogger(__name__)


class HistoryCoordinator:
    """Runs analyses and keeps the visible history in sync with the active stores.

    Anonymous sessions read and write the local store only. Authenticated
    sessions list from the remote store (falling back to local on failure),
    save remotely on a best-effort basis and always mirror to the local store.
    """

    def __init__(
        self,
        *,
        provider: AnalysisProvider,
        local_store: ClearableRecordStore,
        remote_store: AccountRecordStore | None = None,
        session_watcher: SessionWatcher | None = None,
        score_policy: str = POLICY_TRUST,
        score_tolerance: float = 1.0,
    ):
        self._provider = provider
        self._local = local_store
        self._remote = remote_store
        self._watcher = session_watcher
        self._score_policy = score_policy
        self._score_tolerance = score_tolerance
        self._state = HistoryState()
        self._subscription: Subscription | None = None

    @property
    def state(self) -> HistoryState:
        return self._state

    @property
    def identity(self) -> Identity:
        return self._state.identity

    @property
    def history(self) -> list[StoredAnalysis]:
        return list(self._state.history)

    @property
    def current(self) -> StoredAnalysis | None:
        return self._state.current

    def _remote_scope(self, identity: Identity) -> str | None:
        if self._remote is None or not identity.is_authenticated:
            return None
        return identity.user_id

    async def start(self) -> None:
        identity = await self._watcher.current_identity() if self._watcher else ANONYMOUS
        await self.on_session_change(identity)
        if self._watcher is not None and self._subscription is None:
            self._subscription = self._watcher.subscribe(self.on_session_change)

    async def close(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    async def __aenter__(self) -> "HistoryCoordinator":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def on_session_change(self, identity: Identity) -> None:
        self._state = enter_identity(self._state, identity)
        generation = self._state.generation
        if self._remote is not None and identity.is_authenticated:
            self._remote.bind_session(identity.access_token)

        records = await self._load_history(identity)
        if self._state.generation != generation:
            logger.info("history_load_discarded identity=%s", identity.label)
            return
        self._state = with_history(self._state, records)

    async def refresh(self) -> None:
        await self.on_session_change(self._state.identity)

    async def _load_history(self, identity: Identity) -> list[StoredAnalysis]:
        scope = self._remote_scope(identity)
        if scope is not None:
            try:
                return await self._remote.list(scope)
            except StoreError as exc:
                logger.warning("remote_history_load_failed user=%s: %s", scope, exc)

        try:
            return await self._local.list()
        except StoreError as exc:
            logger.warning("local_history_load_failed: %s", exc)
            return []

    async def submit_analysis(
        self,
        job_description: str,
        resume_text: str,
        weights: Weights | None = None,
        file_name: str = "",
    ) -> StoredAnalysis:
        if not (job_description or "").strip() or not (resume_text or "").strip():
            raise InputError("Job description and resume text are required")

        weights = weights or Weights()
        identity = self._state.identity
        generation = self._state.generation

        result = await analyze_resume(self._provider, job_description, resume_text, weights)
        result = apply_score_policy(
            result, weights, policy=self._score_policy, tolerance=self._score_tolerance
        )

        record = StoredAnalysis.from_result(
            result,
            record_id=new_record_id(),
            timestamp=utc_timestamp(),
            file_name=file_name,
        )
        previous = self._state.current
        if self._state.generation == generation:
            self._state = with_current(self._state, record)

        scope = self._remote_scope(identity)
        if scope is not None:
            context = AnalysisContext(
                job_description=job_description,
                resume_text=resume_text,
                weights=weights,
            )
            try:
                saved = await self._remote.save(record, scope, context=context)
            except StoreError as exc:
                logger.warning("analysis_remote_save_failed user=%s: %s", scope, exc)
            else:
                if saved.id and saved.id != record.id:
                    adopted = record.model_copy(update={"id": saved.id})
                    if self._state.generation == generation:
                        self._state = with_replaced_record(self._state, record.id, adopted)
                    record = adopted

        try:
            await self._local.save(record)
        except StoreError as exc:
            logger.error("analysis_local_save_failed id=%s: %s", record.id, exc)
            if self._state.generation == generation and self._state.current_id == record.id:
                self._state = with_current(self._state, previous)
            raise
        if self._state.generation == generation:
            self._state = with_new_record(self._state, record)

        logger.info(
            "analysis_completed id=%s provider=%s identity=%s overall_score=%s",
            record.id,
            getattr(self._provider, "name", "unknown"),
            identity.label,
            record.overall_score,
        )
        return record

    async def get_record(self, record_id: str) -> StoredAnalysis | None:
        """Look up one record: visible history first, then the account's remote rows."""
        record = self._state.find(record_id)
        if record is not None:
            return record
        scope = self._remote_scope(self._state.identity)
        if scope is None:
            return None
        return await self._remote.get(record_id, scope)

    def select_from_history(self, record_id: str) -> StoredAnalysis | None:
        self._state = with_selected(self._state, record_id)
        return self._state.current

    async def delete_from_history(self, record_id: str) -> None:
        scope = self._remote_scope(self._state.identity)
        if scope is not None:
            try:
                deleted = await self._remote.delete(record_id, scope)
                if not deleted:
                    logger.info("analysis_remote_delete_missing id=%s user=%s", record_id, scope)
            except StoreError as exc:
                logger.warning("analysis_remote_delete_failed id=%s user=%s: %s", record_id, scope, exc)

        self._state = without_record(self._state, record_id)
        await self._local.delete(record_id)

    async def clear_history(self) -> None:
        self._state = cleared(self._state)
        await self._local.clear()
