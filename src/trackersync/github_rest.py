from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

import requests

from .errors import TrackerAPIError

DEFAULT_API_URL = "https://api.github.com"
USER_AGENT = "trackersync-github/0.2.0"
HTTP_ERROR_STATUS = 400
REQUEST_TIMEOUT = 30


@dataclass
class GitHubRestClient:
    """Lightweight REST client for the GitHub operations the exporter needs."""

    token: str
    repo: str  # owner/repo
    base_url: str = DEFAULT_API_URL
    session: requests.Session | None = None
    _session: requests.Session = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._session = self.session or requests.Session()
        self._session.headers.setdefault("Authorization", f"Bearer {self.token}")
        self._session.headers.setdefault("Accept", "application/vnd.github+json")
        self._session.headers.setdefault("X-GitHub-Api-Version", "2022-11-28")
        self._session.headers.setdefault("User-Agent", USER_AGENT)

    # ---- REST helpers -------------------------------------------------
    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: Any | None = None,
    ) -> Any:
        url = (
            path
            if path.startswith("http")
            else f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"
        )
        response = self._session.request(
            method,
            url,
            params=params,
            json=json_body,
            headers=self._session.headers,
            timeout=REQUEST_TIMEOUT,
        )
        if response.status_code >= HTTP_ERROR_STATUS:
            raise TrackerAPIError(
                f"GitHub API {method} {url} failed with {response.status_code}",
                status=response.status_code,
                response_text=response.text,
            )
        if response.text:
            try:
                return response.json()
            except ValueError:
                return response.text
        return None

    def _paginate(
        self, path: str, *, params: dict[str, Any] | None = None
    ) -> list[Any]:
        params = dict(params or {})
        per_page = params.setdefault("per_page", 100)
        params.setdefault("page", 1)
        results: list[Any] = []
        while True:
            data = self._request("GET", path, params=dict(params))
            if not isinstance(data, list):
                break
            results.extend(data)
            if len(data) < per_page:
                break
            params["page"] = params.get("page", 1) + 1
        return results

    # ---- Repository ---------------------------------------------------
    def get_repo(self) -> dict[str, Any]:
        data = self._request("GET", f"/repos/{self.repo}")
        return data if isinstance(data, dict) else {}

    # ---- Labels -------------------------------------------------------
    def create_label(self, *, name: str, color: str, description: str | None = None) -> dict[str, Any]:
        payload: dict[str, Any] = {"name": name, "color": color.lstrip("#")}
        if description:
            payload["description"] = description
        data = self._request("POST", f"/repos/{self.repo}/labels", json_body=payload)
        return data if isinstance(data, dict) else {}

    def update_label(self, *, name: str, color: str, description: str | None = None) -> dict[str, Any]:
        payload: dict[str, Any] = {"color": color.lstrip("#")}
        if description:
            payload["description"] = description
        data = self._request(
            "PATCH",
            f"/repos/{self.repo}/labels/{quote(name, safe='')}",
            json_body=payload,
        )
        return data if isinstance(data, dict) else {}

    # ---- Milestones ---------------------------------------------------
    def create_milestone(
        self,
        *,
        title: str,
        description: str | None = None,
        due_on: str | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"title": title, "state": "open"}
        if description:
            payload["description"] = description
        if due_on:
            payload["due_on"] = due_on
        data = self._request("POST", f"/repos/{self.repo}/milestones", json_body=payload)
        return data if isinstance(data, dict) else {}

    def find_milestone(self, title: str) -> dict[str, Any] | None:
        milestones = self._paginate(
            f"/repos/{self.repo}/milestones", params={"state": "all"}
        )
        for entry in milestones:
            if isinstance(entry, dict) and entry.get("title") == title:
                return entry
        return None

    # ---- Issues -------------------------------------------------------
    def create_issue(
        self,
        *,
        title: str,
        body: str,
        labels: Iterable[str] | None = None,
        milestone: int | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"title": title, "body": body}
        label_list = list(labels or [])
        if label_list:
            payload["labels"] = label_list
        if milestone is not None:
            payload["milestone"] = milestone
        data = self._request("POST", f"/repos/{self.repo}/issues", json_body=payload)
        if not isinstance(data, dict) or not isinstance(data.get("number"), int):
            raise TrackerAPIError(f"GitHub did not return an issue number for {title!r}")
        return data

    def add_sub_issue(self, *, parent_number: int, sub_issue_id: int) -> None:
        self._request(
            "POST",
            f"/repos/{self.repo}/issues/{parent_number}/sub_issues",
            json_body={"sub_issue_id": sub_issue_id},
        )


__all__ = ["DEFAULT_API_URL", "GitHubRestClient"]
