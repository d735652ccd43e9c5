"""GraphQL client for the Linear API.

Only the handful of queries and mutations the exporter drives are exposed.
Every mutation checks Linear's ``success`` flag and raises
``TrackerAPIError`` when it is false.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import requests

from .errors import TrackerAPIError

DEFAULT_API_URL = "https://api.linear.app/graphql"
HTTP_ERROR_STATUS = 400
REQUEST_TIMEOUT = 30

_VIEWER = "query { viewer { id name email } }"

_LABELS = """
query TeamLabels($teamId: String!) {
  team(id: $teamId) { labels(first: 250) { nodes { id name color } } }
}
"""

_CREATE_LABEL = """
mutation CreateLabel($name: String!, $color: String!, $teamId: String!) {
  issueLabelCreate(input: { name: $name, color: $color, teamId: $teamId }) {
    success
    issueLabel { id name color }
  }
}
"""

_CREATE_PROJECT = """
mutation CreateProject($name: String!, $description: String, $teamIds: [String!]!) {
  projectCreate(input: { name: $name, description: $description, teamIds: $teamIds }) {
    success
    project { id name url }
  }
}
"""

_CREATE_CYCLE = """
mutation CreateCycle($teamId: String!, $name: String, $startsAt: DateTime!, $endsAt: DateTime!, $description: String) {
  cycleCreate(input: { teamId: $teamId, name: $name, startsAt: $startsAt, endsAt: $endsAt, description: $description }) {
    success
    cycle { id number name startsAt endsAt }
  }
}
"""

_WORKFLOW_STATES = """
query TeamStates($teamId: String!) {
  team(id: $teamId) { states { nodes { id name type } } }
}
"""

_CREATE_ISSUE = """
mutation CreateIssue($input: IssueCreateInput!) {
  issueCreate(input: $input) {
    success
    issue { id identifier title url priority estimate }
  }
}
"""


@dataclass
class LinearClient:
    api_key: str
    team_id: str
    api_url: str = DEFAULT_API_URL
    session: requests.Session | None = None
    _session: requests.Session = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._session = self.session or requests.Session()
        # Personal API keys go in the header verbatim (no Bearer prefix).
        self._session.headers.setdefault("Authorization", self.api_key)
        self._session.headers.setdefault("Content-Type", "application/json")

    def query(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        response = self._session.request(
            "POST",
            self.api_url,
            json={"query": query, "variables": variables or {}},
            headers=self._session.headers,
            timeout=REQUEST_TIMEOUT,
        )
        if response.status_code >= HTTP_ERROR_STATUS:
            raise TrackerAPIError(
                f"Linear API error: {response.status_code}",
                status=response.status_code,
                response_text=response.text,
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise TrackerAPIError("Linear API returned a non-JSON response") from exc
        errors = payload.get("errors") if isinstance(payload, dict) else None
        if errors:
            first = errors[0].get("message") if isinstance(errors[0], dict) else errors[0]
            raise TrackerAPIError(f"Linear GraphQL error: {first}")
        data = payload.get("data") if isinstance(payload, dict) else None
        return data if isinstance(data, dict) else {}

    def _mutate(self, query: str, variables: dict[str, Any], root: str, node: str) -> dict[str, Any]:
        data = self.query(query, variables).get(root) or {}
        if not data.get("success") or not isinstance(data.get(node), dict):
            raise TrackerAPIError(f"Linear {root} was not successful")
        return data[node]

    def verify(self) -> dict[str, Any]:
        viewer = self.query(_VIEWER).get("viewer")
        if not isinstance(viewer, dict):
            raise TrackerAPIError("Linear API key did not resolve a viewer")
        return viewer

    def list_labels(self) -> list[dict[str, Any]]:
        team = self.query(_LABELS, {"teamId": self.team_id}).get("team") or {}
        return list((team.get("labels") or {}).get("nodes") or [])

    def create_label(self, *, name: str, color: str) -> dict[str, Any]:
        return self._mutate(
            _CREATE_LABEL,
            {"name": name, "color": color, "teamId": self.team_id},
            "issueLabelCreate",
            "issueLabel",
        )

    def create_project(self, *, name: str, description: str | None = None) -> dict[str, Any]:
        return self._mutate(
            _CREATE_PROJECT,
            {"name": name, "description": description, "teamIds": [self.team_id]},
            "projectCreate",
            "project",
        )

    def create_cycle(
        self, *, name: str, starts_at: str, ends_at: str, description: str | None = None
    ) -> dict[str, Any]:
        return self._mutate(
            _CREATE_CYCLE,
            {
                "teamId": self.team_id,
                "name": name,
                "startsAt": starts_at,
                "endsAt": ends_at,
                "description": description,
            },
            "cycleCreate",
            "cycle",
        )

    def backlog_state_id(self) -> str | None:
        team = self.query(_WORKFLOW_STATES, {"teamId": self.team_id}).get("team") or {}
        for state in (team.get("states") or {}).get("nodes") or []:
            if isinstance(state, dict) and state.get("type") == "backlog":
                return state.get("id")
        return None

    def create_issue(self, **fields: Any) -> dict[str, Any]:
        issue_input: dict[str, Any] = {"teamId": self.team_id}
        issue_input.update({k: v for k, v in fields.items() if v is not None})
        return self._mutate(_CREATE_ISSUE, {"input": issue_input}, "issueCreate", "issue")


__all__ = ["DEFAULT_API_URL", "LinearClient"]
