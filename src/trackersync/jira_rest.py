from __future__ import annotations

import base64
import json
from dataclasses import dataclass, field
from typing import Any

import requests

from .errors import TrackerAPIError

HTTP_ERROR_STATUS = 400
REQUEST_TIMEOUT = 30
EPIC_LINK_FIELD = "customfield_10014"


def to_adf(text: str) -> dict[str, Any]:
    """Wrap plain text in a minimal Atlassian Document Format document."""
    paragraphs = [p for p in text.split("\n\n") if p.strip()]
    return {
        "type": "doc",
        "version": 1,
        "content": [
            {"type": "paragraph", "content": [{"type": "text", "text": p}]}
            for p in paragraphs
        ],
    }


@dataclass
class JiraClient:
    """Jira Cloud REST v3 + Agile 1.0 client using basic (email + token) auth."""

    base_url: str
    email: str
    api_token: str
    project_key: str
    session: requests.Session | None = None
    _session: requests.Session = field(init=False, repr=False)
    _issue_types: list[dict[str, Any]] | None = field(default=None, init=False, repr=False)
    _priorities: list[dict[str, Any]] | None = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        self._session = self.session or requests.Session()
        raw = f"{self.email}:{self.api_token}".encode()
        self._session.headers.setdefault("Authorization", f"Basic {base64.b64encode(raw).decode()}")
        self._session.headers.setdefault("Accept", "application/json")
        self._session.headers.setdefault("Content-Type", "application/json")

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: Any | None = None,
    ) -> Any:
        url = path if path.startswith("http") else f"{self.base_url.rstrip('/')}{path}"
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
                _error_message(response.status_code, response.text),
                status=response.status_code,
                response_text=response.text,
            )
        if not response.text:
            return {}
        try:
            return response.json()
        except ValueError:
            return response.text

    # ---- Read ---------------------------------------------------------
    def verify(self) -> dict[str, Any]:
        data = self._request("GET", "/rest/api/3/myself")
        return data if isinstance(data, dict) else {}

    def issue_types(self) -> list[dict[str, Any]]:
        if self._issue_types is None:
            project = self._request("GET", f"/rest/api/3/project/{self.project_key}")
            types = project.get("issueTypes") if isinstance(project, dict) else None
            self._issue_types = list(types or [])
        return self._issue_types

    def priorities(self) -> list[dict[str, Any]]:
        if self._priorities is None:
            data = self._request("GET", "/rest/api/3/priority")
            self._priorities = list(data) if isinstance(data, list) else []
        return self._priorities

    def components(self) -> list[dict[str, Any]]:
        data = self._request("GET", f"/rest/api/3/project/{self.project_key}/components")
        return list(data) if isinstance(data, list) else []

    def boards(self) -> list[dict[str, Any]]:
        data = self._request(
            "GET", "/rest/agile/1.0/board", params={"projectKeyOrId": self.project_key}
        )
        return list(data.get("values") or []) if isinstance(data, dict) else []

    # ---- Write --------------------------------------------------------
    def create_component(self, *, name: str, description: str | None = None) -> dict[str, Any]:
        payload: dict[str, Any] = {"name": name, "project": self.project_key}
        if description:
            payload["description"] = description
        return self._request("POST", "/rest/api/3/component", json_body=payload)

    def create_version(
        self,
        *,
        name: str,
        description: str | None = None,
        start_date: str | None = None,
        release_date: str | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"name": name, "project": self.project_key, "released": False}
        if description:
            payload["description"] = description
        if start_date:
            payload["startDate"] = start_date
        if release_date:
            payload["releaseDate"] = release_date
        return self._request("POST", "/rest/api/3/version", json_body=payload)

    def create_sprint(
        self,
        *,
        name: str,
        board_id: int,
        start_date: str | None = None,
        end_date: str | None = None,
        goal: str | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"name": name, "originBoardId": board_id}
        if start_date:
            payload["startDate"] = start_date
        if end_date:
            payload["endDate"] = end_date
        if goal:
            payload["goal"] = goal
        return self._request("POST", "/rest/agile/1.0/sprint", json_body=payload)

    def create_issue(
        self,
        *,
        summary: str,
        issue_type: str,
        description: str | None = None,
        parent_key: str | None = None,
        priority: str | None = None,
        labels: list[str] | None = None,
        components: list[str] | None = None,
        fix_versions: list[str] | None = None,
        extra_fields: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        type_entry = next(
            (t for t in self.issue_types() if str(t.get("name", "")).lower() == issue_type.lower()),
            None,
        )
        if type_entry is None:
            available = ", ".join(str(t.get("name")) for t in self.issue_types())
            raise TrackerAPIError(
                f'Issue type "{issue_type}" not found in project. Available: {available}'
            )
        fields: dict[str, Any] = {
            "project": {"key": self.project_key},
            "summary": summary,
            "issuetype": {"id": type_entry["id"]},
        }
        if description:
            fields["description"] = to_adf(description)
        if parent_key:
            fields["parent"] = {"key": parent_key}
        if priority:
            match = next(
                (p for p in self.priorities() if str(p.get("name", "")).lower() == priority.lower()),
                None,
            )
            if match is not None:
                fields["priority"] = {"id": match["id"]}
        if labels:
            fields["labels"] = labels
        if components:
            fields["components"] = [{"name": c} for c in components]
        if fix_versions:
            fields["fixVersions"] = [{"name": v} for v in fix_versions]
        if extra_fields:
            fields.update(extra_fields)
        data = self._request("POST", "/rest/api/3/issue", json_body={"fields": fields})
        if not isinstance(data, dict) or not data.get("key"):
            raise TrackerAPIError(f"Jira did not return an issue key for {summary!r}")
        return data

    def add_to_sprint(self, sprint_id: int, issue_keys: list[str]) -> None:
        self._request(
            "POST", f"/rest/agile/1.0/sprint/{sprint_id}/issue", json_body={"issues": issue_keys}
        )

    def link_to_epic(self, issue_key: str, epic_key: str) -> None:
        """Attach an issue to an epic.

        Team-managed projects use the ``parent`` field; company-managed
        projects still need the Epic Link custom field.
        """
        try:
            self._request(
                "PUT",
                f"/rest/api/3/issue/{issue_key}",
                json_body={"fields": {"parent": {"key": epic_key}}},
            )
        except TrackerAPIError:
            self._request(
                "PUT",
                f"/rest/api/3/issue/{issue_key}",
                json_body={"fields": {EPIC_LINK_FIELD: epic_key}},
            )

    def browse_url(self, key: str) -> str:
        return f"{self.base_url.rstrip('/')}/browse/{key}"


def _error_message(status: int, body: str) -> str:
    message = f"Jira API error: {status}"
    if not body:
        return message
    try:
        parsed = json.loads(body)
    except ValueError:
        return f"{message} - {body[:200]}"
    details: list[str] = []
    if isinstance(parsed, dict):
        details.extend(str(m) for m in parsed.get("errorMessages") or [])
        errors = parsed.get("errors")
        if isinstance(errors, dict):
            details.extend(str(v) for v in errors.values())
    return f"{message} - {', '.join(details)}" if details else message


__all__ = ["EPIC_LINK_FIELD", "JiraClient", "to_adf"]
