"""Shared fixtures: an in-memory Jira gateway and sample audit lines."""

from __future__ import annotations

import json

import pytest

from jira_shared.common import set_verbose_enabled
from jira_shared.gateway import IssueTrackerGateway, TrackerError
from jira_shared.models import RemoteIssue


class FakeGateway(IssueTrackerGateway):
    """Records every call; tickets live in ``self.tickets`` keyed by ticket key."""

    def __init__(self, project_key: str = "SEC") -> None:
        self.project_key = project_key
        self.tickets: dict[str, RemoteIssue] = {}
        self.parents: dict[str, str] = {}
        self.created: list[dict] = []
        self.status_calls: list[str] = []
        self.list_calls = 0
        self.fail_create_for: set[str] = set()
        self.fail_status_for: set[str] = set()
        self.fail_listing = False
        self._counter = 0

    def add_child(self, key: str, summary: str, status: str, epic_key: str = "SEC-1") -> None:
        self.tickets[key] = RemoteIssue(key=key, summary=summary, status=status)
        self.parents[key] = epic_key

    def add_orphan(self, key: str, summary: str, status: str) -> None:
        self.tickets[key] = RemoteIssue(key=key, summary=summary, status=status)

    def create_ticket(self, project_key, epic_key, summary, description, priority):
        if any(marker in summary for marker in self.fail_create_for):
            return None
        self._counter += 1
        key = f"{project_key}-{100 + self._counter}"
        self.created.append(
            {
                "key": key,
                "project_key": project_key,
                "epic_key": epic_key,
                "summary": summary,
                "description": description,
                "priority": priority,
            }
        )
        self.add_child(key, summary, "To Do", epic_key)
        return key

    def get_ticket_status(self, ticket_key):
        self.status_calls.append(ticket_key)
        if ticket_key in self.fail_status_for:
            raise TrackerError(f"HTTP 503 for {ticket_key}")
        issue = self.tickets.get(ticket_key)
        return issue.status if issue else None

    def list_epic_children(self, epic_key):
        self.list_calls += 1
        if self.fail_listing:
            raise TrackerError("HTTP 500 from search")
        return [
            RemoteIssue(key=t.key, summary=t.summary, status=t.status)
            for key, t in self.tickets.items()
            if self.parents.get(key) == epic_key
        ]


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture(autouse=True)
def _quiet_verbose():
    set_verbose_enabled(False)
    yield
    set_verbose_enabled(False)


def modern_line(
    vuln_id,
    module,
    severity="moderate",
    issue="Prototype Pollution",
    tree_versions=("4.17.15",),
    dependents=("app@workspace:.",),
) -> str:
    return json.dumps(
        {
            "value": module,
            "children": {
                "ID": vuln_id,
                "Issue": issue,
                "URL": f"https://github.com/advisories/{vuln_id}",
                "Severity": severity,
                "Vulnerable Versions": "<4.17.21",
                "Tree Versions": list(tree_versions),
                "Dependents": list(dependents),
            },
        }
    )
