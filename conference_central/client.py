"""HTTP client for the conference API."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import httpx


class ClientError(Exception):
    """Raised when the conference API rejects a request or cannot be reached."""

    def __init__(self, status_code: int, detail: str) -> None:
        super().__init__(f"{status_code}: {detail}" if status_code else detail)
        self.status_code = status_code
        self.detail = detail


def _normalize_base_url(base_url: str) -> str:
    cleaned = (base_url or "").strip()
    if not cleaned:
        raise ValueError("API base URL must not be empty")
    return cleaned.rstrip("/")


def _extract_error_message(payload: object, default: str) -> str:
    if isinstance(payload, dict):
        for key in ("message", "detail", "error"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    if isinstance(payload, str) and payload.strip():
        return payload.strip()
    return default


class ConferenceClient:
    """Call the conference endpoints with an optional bearer API key.

    ``client`` may be any :class:`httpx.Client`, including FastAPI's
    ``TestClient``; otherwise one is created for ``base_url``.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8080",
        api_key: Optional[str] = None,
        *,
        client: Optional[httpx.Client] = None,
        timeout: float = 10.0,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.Client(base_url=_normalize_base_url(base_url), timeout=timeout)
        self._api_key = api_key.strip() if api_key else None

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "ConferenceClient":
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()

    def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        headers: Dict[str, str] = {}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        try:
            response = self._client.request(method, path, json=payload, headers=headers)
        except httpx.RequestError as exc:
            raise ClientError(0, f"Failed to contact conference API: {exc}") from exc

        if response.status_code >= 400:
            message = f"Conference API request failed with status {response.status_code}"
            try:
                parsed = response.json()
            except ValueError:
                parsed = None
            raise ClientError(response.status_code, _extract_error_message(parsed, message))

        try:
            return response.json()
        except ValueError as exc:
            raise ClientError(response.status_code, "Conference API returned an invalid response") from exc

    # Profiles
    def save_profile(
        self,
        display_name: Optional[str] = None,
        tee_shirt_size: Optional[str] = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        if display_name is not None:
            payload["displayName"] = display_name
        if tee_shirt_size is not None:
            payload["teeShirtSize"] = tee_shirt_size
        return self._request("POST", "/profile", payload)

    def get_profile(self) -> Optional[Dict[str, Any]]:
        return self._request("GET", "/profile")

    # Conferences
    def create_conference(self, **fields: Any) -> Dict[str, Any]:
        return self._request("POST", "/conference", fields)

    def update_conference(self, websafe_key: str, **fields: Any) -> Dict[str, Any]:
        return self._request("PUT", f"/conference/{websafe_key}", fields)

    def get_conference(self, websafe_key: str) -> Dict[str, Any]:
        return self._request("GET", f"/conference/{websafe_key}")

    def get_conferences_created(self) -> List[Dict[str, Any]]:
        return self._request("POST", "/getConferencesCreated")

    def query_conferences(
        self,
        filters: Sequence[Dict[str, Any]] = (),
        order: Sequence[str] = (),
    ) -> List[Dict[str, Any]]:
        return self._request("POST", "/queryConferences", {"filters": list(filters), "order": list(order)})

    def get_conferences_filtered(self) -> List[Dict[str, Any]]:
        return self._request("POST", "/getConferencesFiltered")

    # Registration
    def register_for_conference(self, websafe_key: str) -> Dict[str, Any]:
        return self._request("POST", f"/conference/{websafe_key}/registration")

    def unregister_from_conference(self, websafe_key: str) -> Dict[str, Any]:
        return self._request("DELETE", f"/conference/{websafe_key}/registration")

    def get_conferences_to_attend(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/getConferencesToAttend")


__all__ = ["ClientError", "ConferenceClient"]
