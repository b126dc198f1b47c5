from __future__ import annotations

import re
import secrets
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Protocol

from app.schemas.analysis import AnalysisResult, StoredAnalysis, Weights

# Older interpreters only accept 3 or 6 fractional digits in fromisoformat.
_FRACTION = re.compile(r"\.(\d+)")


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def new_record_id() -> str:
    return f"analysis-{int(time.time() * 1000)}-{secrets.token_hex(3)}"


def ensure_stored(record: AnalysisResult | StoredAnalysis, *, file_name: str = "") -> StoredAnalysis:
    """Give a bare AnalysisResult an id and timestamp; StoredAnalysis passes through."""
    if isinstance(record, StoredAnalysis):
        return record
    return StoredAnalysis.from_result(
        record,
        record_id=new_record_id(),
        timestamp=utc_timestamp(),
        file_name=file_name,
    )


def _normalize_fraction(match: re.Match) -> str:
    return "." + match.group(1)[:6].ljust(6, "0")


def parse_timestamp(value: str) -> datetime:
    normalized = _FRACTION.sub(_normalize_fraction, value.replace("Z", "+00:00"), count=1)
    try:
        parsed = datetime.fromisoformat(normalized)
    except ValueError:
        return datetime.min.replace(tzinfo=timezone.utc)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def newest_first(records: list[StoredAnalysis]) -> list[StoredAnalysis]:
    return sorted(records, key=lambda item: parse_timestamp(item.timestamp), reverse=True)


@dataclass(frozen=True)
class AnalysisContext:
    """Inputs an analysis was produced from, kept by stores that persist them."""

    job_description: str = ""
    resume_text: str = ""
    weights: Weights = field(default_factory=Weights)


class RecordStore(Protocol):
    """Persistence for StoredAnalysis records.

    ``scope`` is the authenticated user id for remote stores and is ignored by
    the local store. ``save`` returns the record as stored, which may carry a
    store-assigned id.
    """

    async def save(
        self,
        record: AnalysisResult | StoredAnalysis,
        scope: str | None = None,
        *,
        context: AnalysisContext | None = None,
    ) -> StoredAnalysis: ...

    async def list(self, scope: str | None = None) -> list[StoredAnalysis]: ...

    async def delete(self, record_id: str, scope: str | None = None) -> bool: ...


class ClearableRecordStore(RecordStore, Protocol):
    async def clear(self, scope: str | None = None) -> None: ...


class AccountRecordStore(RecordStore, Protocol):
    """A RecordStore bound to a signed-in user's session token."""

    def bind_session(self, access_token: str | None) -> None: ...

    async def get(self, record_id: str, scope: str | None = None) -> StoredAnalysis | None: ...
