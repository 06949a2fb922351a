"""When To Meet API client: lowest level, sends requests and maps failures onto the error taxonomy."""
import logging
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from whentomeet.config import settings
from whentomeet.core.errors import (
    ConfigurationError,
    NotFoundError,
    TransientIOError,
    ValidationError,
    WhenToMeetError,
)
from whentomeet.services.types import Calendar, Profile, SlotTable

logger = logging.getLogger(__name__)

# Status -> exception type; anything else unsuccessful is a TransientIOError
_STATUS_ERRORS: dict[int, type[WhenToMeetError]] = {
    400: ValidationError,
    404: NotFoundError,
    422: ValidationError,
    503: ConfigurationError,
}


def _error_detail(r: httpx.Response) -> str:
    """The API's {"error": ...} message; a proxy or gateway may answer with any other body."""
    try:
        body = r.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and isinstance(body.get("error"), str) and body["error"]:
        return body["error"]
    return r.text[:500]


class AvailabilityClient:
    """Roster and calendar calls against the HTTP API. Safe to share across threads."""

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        # http_client lets tests pass a FastAPI TestClient (an httpx.Client)
        self._http = http_client or httpx.Client(
            base_url=base_url or settings.api_base_url,
            timeout=timeout or settings.client_timeout_seconds,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "AvailabilityClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            r = self._http.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error("%s %s failed: %s", method, path, e)
            raise TransientIOError(f"{method} {path} failed: {e}") from e
        if not r.is_success:
            detail = _error_detail(r)
            exc_type = _STATUS_ERRORS.get(r.status_code, TransientIOError)
            if exc_type is not NotFoundError:
                logger.error("%s %s -> %s: %s", method, path, r.status_code, detail)
            raise exc_type(detail or f"API error: {r.status_code}")
        try:
            return r.json() if r.content else {}
        except ValueError as e:
            raise TransientIOError(f"{method} {path}: response is not JSON") from e

    # --- Roster ---

    def list_users(self) -> list[Profile]:
        rows = self._request("GET", "/api/users")
        if not isinstance(rows, list):
            raise TransientIOError("GET /api/users: expected a list of profiles")
        try:
            return [Profile.model_validate(row) for row in rows]
        except PydanticValidationError as e:
            raise TransientIOError(f"GET /api/users: malformed profile: {e.errors()[0]['msg']}") from e

    def find_user_by_name(self, name: str) -> Profile | None:
        try:
            return Profile.model_validate(self._request("GET", "/api/users/lookup", params={"name": name}))
        except NotFoundError:
            return None

    def save_user(self, profile: Profile) -> Profile:
        data = self._request("POST", "/api/users", json=profile.to_json())
        return Profile.model_validate(data.get("user") or profile.to_json())

    def rename_user(self, user_id: str, name: str, color: str) -> int:
        data = self._request("PUT", "/api/users", json={"userId": user_id, "userName": name, "color": color})
        return int(data.get("updated", 0))

    def delete_user(self, user_id: str) -> None:
        self._request("DELETE", "/api/users", params={"userId": user_id})

    # --- Calendar ---

    def get_week(self, week_key: str) -> SlotTable:
        table = self._request("GET", "/api/calendar", params={"weekKey": week_key})
        if not isinstance(table, dict):
            raise TransientIOError("GET /api/calendar: expected a slot table object")
        return table

    def get_all_weeks(self) -> Calendar:
        return self._request("GET", "/api/calendar")

    def replace_week(self, week_key: str, table: SlotTable) -> None:
        self._request("POST", "/api/calendar", json={"weekKey": week_key, "data": table})

    def update_slot(self, week_key: str, day: int, time_index: int, profile: Profile, selected: bool) -> None:
        self._request(
            "PUT",
            "/api/calendar",
            json={
                "weekKey": week_key,
                "day": day,
                "timeIndex": time_index,
                "userId": profile.id,
                "userName": profile.name,
                "color": profile.color,
                "isSelected": selected,
            },
        )
