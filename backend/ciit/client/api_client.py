"""HTTP client for the CIIT API, used by the interview-side session manager."""
from __future__ import annotations
from typing import Any, List, Optional

import requests

from ciit.core.config import API_BASE_URL
from ciit.domain.catalog.rules import slugify_concept_id


class ApiClientError(Exception):
    """A request failed: no connection, or the server answered with an error status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class SessionApiClient:
    """
    Thin wrapper over the REST API. ``http`` is any object with a
    ``requests``-style ``request(method, url, **kwargs)``; a plain
    ``requests.Session`` is used when none is given.
    """

    def __init__(self, base_url: str = API_BASE_URL, http: Any = None):
        self.base_url = base_url.rstrip("/")
        self._http = http if http is not None else requests.Session()

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        try:
            resp = self._http.request(method, url, **kwargs)
        except requests.RequestException as e:
            raise ApiClientError(f"{method} {path} failed: {e}") from e
        if resp.status_code >= 400:
            try:
                message = resp.json().get("error") or resp.text
            except ValueError:
                message = resp.text
            raise ApiClientError(f"{method} {path} -> {resp.status_code}: {message}", resp.status_code)
        return resp.json()

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------
    def list_sessions(self, status: Optional[str] = None) -> List[dict]:
        params = {"status": status} if status else None
        return self._request("GET", "/api/sessions", params=params)

    def get_session(self, session_id: str) -> dict:
        return self._request("GET", f"/api/sessions/{session_id}")

    def create_session(self, data: dict) -> dict:
        return self._request("POST", "/api/sessions", json=data)

    def put_session(self, session_id: str, data: dict) -> dict:
        return self._request("PUT", f"/api/sessions/{session_id}", json=data)

    def delete_session(self, session_id: str) -> bool:
        return bool(self._request("DELETE", f"/api/sessions/{session_id}").get("success"))

    def get_summary(self, session_id: str) -> dict:
        return self._request("GET", f"/api/sessions/{session_id}/summary")

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------
    def list_topics(self) -> List[dict]:
        return self._request("GET", "/api/topics")

    def list_barriers(self) -> List[dict]:
        return self._request("GET", "/api/barriers")

    def list_concepts(self) -> List[dict]:
        return self._request("GET", "/api/concepts")

    def update_concept_topics(self, concept_id: str, topics: List[str]) -> dict:
        return self._request("PATCH", f"/api/concepts/{concept_id}/topics", json={"topics": topics})["concept"]

    def update_concept(self, concept_id: str, data: dict) -> dict:
        return self._request("PUT", f"/api/concepts/{concept_id}", json=data)["concept"]

    def upload_concept_image(self, concept_id: str, filename: str, payload: bytes, content_type: str) -> str:
        files = {"image": (filename, payload, content_type)}
        return self._request("POST", f"/api/concepts/{concept_id}/image", files=files)["image"]

    def create_concept(self, data: dict) -> dict:
        """The id defaults to one derived from the concept name."""
        doc = {**data, "id": data.get("id") or slugify_concept_id(data.get("name", ""))}
        doc.setdefault("image", "")
        return self._request("POST", "/api/concepts", json=doc)["concept"]
