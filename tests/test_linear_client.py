from __future__ import annotations

import pytest
from fakes import DummyResponse, DummySession

from trackersync.errors import TrackerAPIError
from trackersync.linear_graphql import LinearClient


def _client(responses: list[DummyResponse]) -> tuple[LinearClient, DummySession]:
    session = DummySession(responses)
    return LinearClient(api_key="lin_api_key", team_id="TEAM", session=session), session


def test_query_sends_raw_api_key():
    client, session = _client([DummyResponse(200, {"data": {"viewer": {"id": "u1"}}})])

    assert client.verify() == {"id": "u1"}
    method, url, kwargs = session.request_log[0]
    assert (method, url) == ("POST", "https://api.linear.app/graphql")
    assert kwargs["headers"]["Authorization"] == "lin_api_key"
    assert "viewer" in kwargs["json"]["query"]


def test_graphql_errors_raise():
    client, _ = _client([DummyResponse(200, {"errors": [{"message": "Entity not found"}]})])

    with pytest.raises(TrackerAPIError, match="Entity not found"):
        client.list_labels()


def test_http_errors_raise_with_status():
    client, _ = _client([DummyResponse(401, {"error": "unauthorized"})])

    with pytest.raises(TrackerAPIError) as excinfo:
        client.verify()

    assert excinfo.value.status == 401


def test_unsuccessful_mutation_raises():
    client, _ = _client(
        [DummyResponse(200, {"data": {"issueLabelCreate": {"success": False, "issueLabel": None}}})]
    )

    with pytest.raises(TrackerAPIError, match="issueLabelCreate"):
        client.create_label(name="bug", color="#EF4444")


def test_list_labels_and_backlog_state():
    client, _ = _client(
        [
            DummyResponse(
                200, {"data": {"team": {"labels": {"nodes": [{"id": "l1", "name": "Bug"}]}}}}
            ),
            DummyResponse(
                200,
                {
                    "data": {
                        "team": {
                            "states": {
                                "nodes": [
                                    {"id": "s0", "type": "started"},
                                    {"id": "s1", "type": "backlog"},
                                ]
                            }
                        }
                    }
                },
            ),
        ]
    )

    assert client.list_labels() == [{"id": "l1", "name": "Bug"}]
    assert client.backlog_state_id() == "s1"


def test_create_issue_drops_empty_fields():
    client, session = _client(
        [
            DummyResponse(
                200,
                {
                    "data": {
                        "issueCreate": {
                            "success": True,
                            "issue": {"id": "i1", "identifier": "ENG-1"},
                        }
                    }
                },
            )
        ]
    )

    issue = client.create_issue(title="Build", description=None, priority=2, cycleId=None)

    assert issue["identifier"] == "ENG-1"
    sent = session.request_log[0][2]["json"]["variables"]["input"]
    assert sent == {"teamId": "TEAM", "title": "Build", "priority": 2}
