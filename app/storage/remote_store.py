from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from app.core.errors import StoreError
from app.schemas.analysis import AnalysisResult, StoredAnalysis
from app.schemas.remote import (
    AnalysisResultRow,
    ScorePoint,
    UserProfile,
    UserProfileUpdate,
    UserStats,
)
from app.storage.types import AnalysisContext

logger = logging.getLogger(__name__)

ANALYSIS_TABLE = "analysis_results"
PROFILE_TABLE = "user_profiles"
DEFAULT_LIST_LIMIT = 50


def _require_user(user_id: str | None) -> str:
    if not user_id:
        raise StoreError("Remote store operations require an authenticated user id", code="missing_scope")
    return user_id


class RemoteStore:
    """Supabase (PostgREST) backed history for authenticated users.

    Every query carries a ``user_id=eq.<id>`` filter; there is no bulk clear.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        base_url: str,
        anon_key: str,
        access_token: str | None = None,
    ):
        self._client = client
        self._rest_url = base_url.rstrip("/") + "/rest/v1"
        self._auth_url = base_url.rstrip("/") + "/auth/v1"
        self._anon_key = anon_key
        self._access_token = access_token

    def bind_session(self, access_token: str | None) -> None:
        self._access_token = access_token

    async def resolve_user_id(self, access_token: str) -> str:
        """Return the user id behind a session access token."""
        try:
            response = await self._client.get(
                f"{self._auth_url}/user",
                headers={"apikey": self._anon_key, "Authorization": f"Bearer {access_token}"},
            )
        except httpx.HTTPError as exc:
            logger.warning("remote_auth_unreachable: %s", exc)
            raise StoreError(f"Remote auth unreachable: {exc}") from exc

        if response.status_code in (401, 403):
            raise StoreError("Session token was rejected", code="invalid_session")
        if response.status_code >= 400:
            logger.warning("remote_auth_http_error status=%s body=%s", response.status_code, response.text[:500])
            raise StoreError(f"Remote auth error: {response.status_code}")

        try:
            user_id = response.json().get("id")
        except (ValueError, AttributeError) as exc:
            raise StoreError("Remote auth returned an unreadable body") from exc
        if not user_id:
            raise StoreError("Session token has no user", code="invalid_session")
        return str(user_id)

    def _headers(self, *, prefer: str | None = None) -> dict[str, str]:
        headers = {
            "apikey": self._anon_key,
            "Authorization": f"Bearer {self._access_token or self._anon_key}",
            "Content-Type": "application/json",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    async def _request(
        self,
        method: str,
        table: str,
        *,
        params: dict[str, str] | None = None,
        json_body: Any = None,
        prefer: str | None = None,
    ) -> Any:
        try:
            response = await self._client.request(
                method,
                f"{self._rest_url}/{table}",
                params=params,
                json=json_body,
                headers=self._headers(prefer=prefer),
            )
        except httpx.HTTPError as exc:
            logger.warning("remote_store_unreachable method=%s table=%s: %s", method, table, exc)
            raise StoreError(f"Remote store unreachable: {exc}") from exc

        if response.status_code >= 400:
            logger.warning(
                "remote_store_http_error method=%s table=%s status=%s body=%s",
                method,
                table,
                response.status_code,
                response.text[:500],
            )
            raise StoreError(f"Remote store error: {response.status_code}")

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise StoreError("Remote store returned an unreadable body") from exc

    @staticmethod
    def _rows(payload: Any) -> list[dict[str, Any]]:
        if payload is None:
            return []
        if isinstance(payload, dict):
            return [payload]
        if isinstance(payload, list):
            return [item for item in payload if isinstance(item, dict)]
        raise StoreError("Remote store returned an unexpected body")

    @staticmethod
    def _to_stored(row: dict[str, Any]) -> StoredAnalysis:
        try:
            return AnalysisResultRow.model_validate(row).to_stored()
        except PydanticValidationError as exc:
            raise StoreError(f"Remote row does not match analysis schema: {exc}") from exc

    async def save(
        self,
        record: AnalysisResult | StoredAnalysis,
        scope: str | None = None,
        *,
        context: AnalysisContext | None = None,
    ) -> StoredAnalysis:
        """Insert ``record`` for ``scope``; the returned record carries the row id."""
        user_id = _require_user(scope)
        context = context or AnalysisContext()
        row = AnalysisResultRow.from_result(
            record,
            user_id=user_id,
            job_description=context.job_description,
            resume_text=context.resume_text,
            weights=context.weights,
        )
        payload = await self._request(
            "POST",
            ANALYSIS_TABLE,
            json_body=row.insert_payload(),
            prefer="return=representation",
        )
        rows = self._rows(payload)
        if not rows:
            raise StoreError("Remote store did not return the saved record")
        return self._to_stored(rows[0])

    async def list(self, scope: str | None = None, limit: int = DEFAULT_LIST_LIMIT) -> list[StoredAnalysis]:
        user_id = _require_user(scope)
        payload = await self._request(
            "GET",
            ANALYSIS_TABLE,
            params={
                "select": "*",
                "user_id": f"eq.{user_id}",
                "order": "created_at.desc",
                "limit": str(limit),
            },
        )
        return [self._to_stored(row) for row in self._rows(payload)]

    async def get(self, record_id: str, scope: str | None = None) -> StoredAnalysis | None:
        user_id = _require_user(scope)
        payload = await self._request(
            "GET",
            ANALYSIS_TABLE,
            params={"select": "*", "id": f"eq.{record_id}", "user_id": f"eq.{user_id}"},
        )
        rows = self._rows(payload)
        return self._to_stored(rows[0]) if rows else None

    async def delete(self, record_id: str, scope: str | None = None) -> bool:
        user_id = _require_user(scope)
        payload = await self._request(
            "DELETE",
            ANALYSIS_TABLE,
            params={"id": f"eq.{record_id}", "user_id": f"eq.{user_id}"},
            prefer="return=representation",
        )
        return bool(self._rows(payload))

    async def stats(self, scope: str | None = None) -> UserStats:
        user_id = _require_user(scope)
        payload = await self._request(
            "GET",
            ANALYSIS_TABLE,
            params={
                "select": "overall_score,created_at",
                "user_id": f"eq.{user_id}",
                "order": "created_at.desc",
            },
        )
        points = [ScorePoint.model_validate(row) for row in self._rows(payload)]
        total = len(points)
        average = sum(point.overall_score for point in points) / total if total else 0
        return UserStats(
            total_analyses=total,
            average_score=int(round(average)),
            recent_analyses=points[:5],
            score_trend=[point.overall_score for point in points[:10]],
        )

    async def get_profile(self, scope: str | None = None) -> UserProfile | None:
        user_id = _require_user(scope)
        payload = await self._request(
            "GET",
            PROFILE_TABLE,
            params={"select": "*", "user_id": f"eq.{user_id}"},
        )
        rows = self._rows(payload)
        return UserProfile.model_validate(rows[0]) if rows else None

    async def create_profile(self, scope: str | None, profile: UserProfileUpdate) -> UserProfile:
        user_id = _require_user(scope)
        body = {"user_id": user_id, **profile.model_dump(exclude_none=True)}
        payload = await self._request("POST", PROFILE_TABLE, json_body=body, prefer="return=representation")
        rows = self._rows(payload)
        if not rows:
            raise StoreError("Remote store did not return the created profile")
        return UserProfile.model_validate(rows[0])

    async def update_profile(self, scope: str | None, updates: UserProfileUpdate) -> UserProfile | None:
        user_id = _require_user(scope)
        payload = await self._request(
            "PATCH",
            PROFILE_TABLE,
            params={"user_id": f"eq.{user_id}"},
            json_body=updates.model_dump(exclude_none=True),
            prefer="return=representation",
        )
        rows = self._rows(payload)
        return UserProfile.model_validate(rows[0]) if rows else None
