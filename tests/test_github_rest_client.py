import pytest
from fakes import DummyResponse, DummySession

from trackersync.errors import TrackerAPIError
from trackersync.github_rest import GitHubRestClient


def test_rest_client_sets_auth_headers():
    session = DummySession([DummyResponse(200, {"full_name": "acme/widgets"})])
    client = GitHubRestClient(token="tkn", repo="acme/widgets", session=session)

    assert client.get_repo() == {"full_name": "acme/widgets"}
    method, url, kwargs = session.request_log[0]
    assert method == "GET"
    assert url == "https://api.github.com/repos/acme/widgets"
    assert kwargs["headers"]["Authorization"] == "Bearer tkn"
    assert kwargs["headers"]["X-GitHub-Api-Version"] == "2022-11-28"


def test_rest_client_creates_issue_with_milestone():
    session = DummySession([DummyResponse(201, {"number": 321, "id": 9001})])
    client = GitHubRestClient(token="tkn", repo="acme/widgets", session=session)

    issue = client.create_issue(title="Demo", body="Body", labels=["bug"], milestone=7)

    assert issue["number"] == 321
    assert session.request_log[0][0] == "POST"
    assert session.request_log[0][1].endswith("/repos/acme/widgets/issues")
    assert session.request_log[0][2]["json"] == {
        "title": "Demo",
        "body": "Body",
        "labels": ["bug"],
        "milestone": 7,
    }


def test_rest_client_requires_issue_number():
    session = DummySession([DummyResponse(201, {"id": 1})])
    client = GitHubRestClient(token="tkn", repo="acme/widgets", session=session)

    with pytest.raises(TrackerAPIError):
        client.create_issue(title="Demo", body="Body")


def test_rest_client_raises_on_error():
    session = DummySession([DummyResponse(500, {"message": "boom"})])
    client = GitHubRestClient(token="tkn", repo="acme/widgets", session=session)

    with pytest.raises(TrackerAPIError) as excinfo:
        client.create_label(name="bug", color="#d73a4a")

    assert excinfo.value.status == 500
    assert "boom" in (excinfo.value.response_text or "")


def test_label_update_quotes_name_and_strips_hash():
    session = DummySession([DummyResponse(200, {"name": "needs review"})])
    client = GitHubRestClient(token="tkn", repo="acme/widgets", session=session)

    client.update_label(name="needs review", color="#ffffff", description="Review")

    method, url, kwargs = session.request_log[0]
    assert method == "PATCH"
    assert url.endswith("/labels/needs%20review")
    assert kwargs["json"] == {"color": "ffffff", "description": "Review"}


def test_find_milestone_paginates():
    first_page = [{"title": f"M{i}", "number": i} for i in range(100)]
    session = DummySession(
        [
            DummyResponse(200, first_page),
            DummyResponse(200, [{"title": "Phase 1", "number": 101}]),
        ]
    )
    client = GitHubRestClient(token="tkn", repo="acme/widgets", session=session)

    found = client.find_milestone("Phase 1")

    assert found == {"title": "Phase 1", "number": 101}
    assert [entry[2]["params"]["page"] for entry in session.request_log] == [1, 2]
    assert session.request_log[0][2]["params"]["state"] == "all"


def test_add_sub_issue_posts_issue_id():
    session = DummySession([DummyResponse(201, {})])
    client = GitHubRestClient(token="tkn", repo="acme/widgets", session=session)

    client.add_sub_issue(parent_number=5, sub_issue_id=9001)

    method, url, kwargs = session.request_log[0]
    assert (method, kwargs["json"]) == ("POST", {"sub_issue_id": 9001})
    assert url.endswith("/repos/acme/widgets/issues/5/sub_issues")
