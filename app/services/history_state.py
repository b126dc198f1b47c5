from __future__ import annotations

from dataclasses import dataclass, replace

from app.schemas.analysis import StoredAnalysis
from app.services.session_watcher import ANONYMOUS, Identity
from app.storage.types import newest_first


@dataclass(frozen=True)
class HistoryState:
    """Visible history and current result for one identity.

    ``generation`` increases on every identity transition so late results of
    an older load can be recognised and dropped.
    """

    identity: Identity = ANONYMOUS
    history: tuple[StoredAnalysis, ...] = ()
    current: StoredAnalysis | None = None
    generation: int = 0

    @property
    def current_id(self) -> str | None:
        return self.current.id if self.current is not None else None

    def find(self, record_id: str) -> StoredAnalysis | None:
        return next((item for item in self.history if item.id == record_id), None)


def enter_identity(state: HistoryState, identity: Identity) -> HistoryState:
    return HistoryState(identity=identity, generation=state.generation + 1)


def with_history(state: HistoryState, records: list[StoredAnalysis]) -> HistoryState:
    return replace(state, history=tuple(newest_first(records)))


def with_current(state: HistoryState, record: StoredAnalysis | None) -> HistoryState:
    return replace(state, current=record)


def with_new_record(state: HistoryState, record: StoredAnalysis) -> HistoryState:
    remaining = tuple(item for item in state.history if item.id != record.id)
    return replace(state, history=(record, *remaining))


def with_replaced_record(state: HistoryState, old_id: str, record: StoredAnalysis) -> HistoryState:
    history = tuple(record if item.id == old_id else item for item in state.history)
    current = record if state.current_id == old_id else state.current
    return replace(state, history=history, current=current)


def with_selected(state: HistoryState, record_id: str) -> HistoryState:
    record = state.find(record_id)
    if record is None:
        return state
    return replace(state, current=record)


def without_record(state: HistoryState, record_id: str) -> HistoryState:
    history = tuple(item for item in state.history if item.id != record_id)
    current = None if state.current_id == record_id else state.current
    return replace(state, history=history, current=current)


def cleared(state: HistoryState) -> HistoryState:
    return replace(state, history=(), current=None)
