from unittest.mock import MagicMock

import pytest
import requests

from jira_shared.gateway import TrackerError
from jira_shared.jira_issues import JiraIssueGateway
from jira_shared.models import RemoteIssue


def _response(status_code=200, payload=None, text=""):
    resp = MagicMock()
    resp.status_code = status_code
    resp.ok = 200 <= status_code < 400
    resp.text = text
    if payload is None:
        resp.json.side_effect = ValueError("no json")
    else:
        resp.json.return_value = payload
    return resp


def _gateway(session, **kwargs):
    return JiraIssueGateway(
        "https://jira.example.com/",
        "bot@example.com",
        "secret",
        session=session,
        **kwargs,
    )


def test_auth_and_base_url_are_configured():
    session = MagicMock()
    gw = _gateway(session)

    assert gw.base_url == "https://jira.example.com"
    assert session.auth.username == "bot@example.com"
    assert session.auth.password == "secret"


def test_create_ticket_posts_fields_and_returns_key():
    session = MagicMock()
    session.post.return_value = _response(201, {"key": "SEC-42"})
    gw = _gateway(session, issue_type="Bug", timeout=5)

    key = gw.create_ticket("SEC", "SEC-1", "[HIGH] Vulnerability in ms", "desc", "High")

    assert key == "SEC-42"
    args, kwargs = session.post.call_args
    assert args[0] == "https://jira.example.com/rest/api/2/issue"
    assert kwargs["timeout"] == 5
    assert kwargs["json"] == {
        "fields": {
            "project": {"key": "SEC"},
            "summary": "[HIGH] Vulnerability in ms",
            "description": "desc",
            "issuetype": {"name": "Bug"},
            "parent": {"key": "SEC-1"},
            "priority": {"name": "High"},
        }
    }


def test_create_ticket_default_issue_type_and_no_empty_priority():
    session = MagicMock()
    session.post.return_value = _response(201, {"key": "SEC-42"})

    _gateway(session).create_ticket("SEC", "SEC-1", "s", "d", "")

    fields = session.post.call_args.kwargs["json"]["fields"]
    assert fields["issuetype"] == {"name": "Code Task"}
    assert "priority" not in fields


@pytest.mark.parametrize(
    "outcome",
    [
        _response(400, {"errors": {"priority": "invalid"}}),
        _response(201, {}),
        requests.ConnectionError("boom"),
    ],
)
def test_create_ticket_failures_return_none(outcome, capsys):
    session = MagicMock()
    if isinstance(outcome, Exception):
        session.post.side_effect = outcome
    else:
        session.post.return_value = outcome

    assert _gateway(session).create_ticket("SEC", "SEC-1", "[LOW] Vulnerability in x", "d", "Low") is None
    assert "WARN:" in capsys.readouterr().err


def test_get_ticket_status():
    session = MagicMock()
    session.get.return_value = _response(200, {"fields": {"status": {"name": "In Progress"}}})

    assert _gateway(session).get_ticket_status("SEC-7") == "In Progress"
    args, kwargs = session.get.call_args
    assert args[0] == "https://jira.example.com/rest/api/2/issue/SEC-7"
    assert kwargs["params"] == {"fields": "status"}


def test_get_ticket_status_not_found_is_none():
    session = MagicMock()
    session.get.return_value = _response(404, {"errorMessages": ["Issue does not exist"]})

    assert _gateway(session).get_ticket_status("SEC-7") is None


@pytest.mark.parametrize(
    "outcome",
    [
        _response(500, text="server error"),
        _response(401, {"errorMessages": ["unauthorized"]}),
        _response(200, {"fields": {}}),
        requests.Timeout("slow"),
    ],
)
def test_get_ticket_status_other_failures_raise(outcome):
    session = MagicMock()
    if isinstance(outcome, Exception):
        session.get.side_effect = outcome
    else:
        session.get.return_value = outcome

    with pytest.raises(TrackerError):
        _gateway(session).get_ticket_status("SEC-7")


def _issue(key, summary, status):
    return {"key": key, "fields": {"summary": summary, "status": {"name": status}}}


def test_list_epic_children_paginates():
    session = MagicMock()
    session.get.side_effect = [
        _response(200, {"total": 3, "issues": [_issue("SEC-2", "a", "To Do"), _issue("SEC-3", "b", "Done")]}),
        _response(200, {"total": 3, "issues": [_issue("SEC-4", "c", "In Progress")]}),
    ]

    children = _gateway(session).list_epic_children("SEC-1")

    assert children == [
        RemoteIssue("SEC-2", "a", "To Do"),
        RemoteIssue("SEC-3", "b", "Done"),
        RemoteIssue("SEC-4", "c", "In Progress"),
    ]
    first, second = session.get.call_args_list
    assert first.args[0] == "https://jira.example.com/rest/api/2/search"
    assert first.kwargs["params"]["jql"] == "parent=SEC-1"
    assert first.kwargs["params"]["startAt"] == 0
    assert second.kwargs["params"]["startAt"] == 2


def test_list_epic_children_empty_epic():
    session = MagicMock()
    session.get.return_value = _response(200, {"total": 0, "issues": []})

    assert _gateway(session).list_epic_children("SEC-1") == []
    assert session.get.call_count == 1


@pytest.mark.parametrize(
    "outcome",
    [_response(400, {"errorMessages": ["bad jql"]}), _response(200, None, text="<html>"), requests.ConnectionError()],
)
def test_list_epic_children_failures_raise(outcome):
    session = MagicMock()
    if isinstance(outcome, Exception):
        session.get.side_effect = outcome
    else:
        session.get.return_value = outcome

    with pytest.raises(TrackerError):
        _gateway(session).list_epic_children("SEC-1")
