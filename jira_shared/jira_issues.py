#
# Copyright 2026 ABSA Group Limited
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#

"""Jira REST (API v2) operations – create a ticket under an epic, read a
ticket's workflow status, and list the child tickets of an epic.
"""

from __future__ import annotations

from typing import Any

import requests
from requests.auth import HTTPBasicAuth

from .common import vprint, warn
from .gateway import IssueTrackerGateway, TrackerError
from .models import RemoteIssue

DEFAULT_ISSUE_TYPE = "Code Task"
SEARCH_PAGE_SIZE = 100


def _response_detail(resp: requests.Response) -> str:
    try:
        return str(resp.json())
    except ValueError:
        return resp.text


class JiraIssueGateway(IssueTrackerGateway):
    """:class:`IssueTrackerGateway` backed by the Jira Cloud / Server REST API."""

    def __init__(
        self,
        base_url: str,
        email: str,
        api_token: str,
        *,
        issue_type: str = DEFAULT_ISSUE_TYPE,
        timeout: float = 30,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.issue_type = issue_type
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.auth = HTTPBasicAuth(email, api_token)
        self.session.headers.update({"Accept": "application/json"})

    def _url(self, path: str) -> str:
        return f"{self.base_url}/rest/api/2/{path.lstrip('/')}"

    def create_ticket(
        self,
        project_key: str,
        epic_key: str,
        summary: str,
        description: str,
        priority: str,
    ) -> str | None:
        fields: dict[str, Any] = {
            "project": {"key": project_key},
            "summary": summary,
            "description": description,
            "issuetype": {"name": self.issue_type},
            "parent": {"key": epic_key},
        }
        if priority:
            fields["priority"] = {"name": priority}

        try:
            resp = self.session.post(self._url("issue"), json={"fields": fields}, timeout=self.timeout)
        except requests.RequestException as exc:
            warn(f"Failed to create Jira ticket {summary!r}: {exc}")
            return None

        if not resp.ok:
            warn(f"Failed to create Jira ticket {summary!r} (HTTP {resp.status_code}): {_response_detail(resp)}")
            return None

        try:
            key = str(resp.json().get("key") or "")
        except ValueError:
            key = ""
        if not key:
            warn(f"Jira accepted ticket {summary!r} but returned no key: {resp.text!r}")
            return None

        print(f"Created Jira ticket: {key}")
        return key

    def get_ticket_status(self, ticket_key: str) -> str | None:
        try:
            resp = self.session.get(
                self._url(f"issue/{ticket_key}"),
                params={"fields": "status"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise TrackerError(f"Error fetching ticket status for {ticket_key}: {exc}") from exc

        if resp.status_code == 404:
            vprint(f"Ticket {ticket_key} not found in Jira.")
            return None
        if not resp.ok:
            raise TrackerError(
                f"Error fetching ticket status for {ticket_key} (HTTP {resp.status_code}): {_response_detail(resp)}"
            )

        try:
            return str(resp.json()["fields"]["status"]["name"])
        except (ValueError, KeyError, TypeError) as exc:
            raise TrackerError(f"Unexpected status payload for {ticket_key}: {resp.text!r}") from exc

    def list_epic_children(self, epic_key: str) -> list[RemoteIssue]:
        children: list[RemoteIssue] = []
        start_at = 0

        while True:
            try:
                resp = self.session.get(
                    self._url("search"),
                    params={
                        "jql": f"parent={epic_key}",
                        "fields": "summary,status",
                        "startAt": start_at,
                        "maxResults": SEARCH_PAGE_SIZE,
                    },
                    timeout=self.timeout,
                )
            except requests.RequestException as exc:
                raise TrackerError(f"Error fetching child issues for epic {epic_key}: {exc}") from exc

            if not resp.ok:
                raise TrackerError(
                    f"Error fetching child issues for epic {epic_key} "
                    f"(HTTP {resp.status_code}): {_response_detail(resp)}"
                )

            try:
                payload = resp.json()
            except ValueError as exc:
                raise TrackerError(f"Unparseable search response for epic {epic_key}: {resp.text!r}") from exc

            issues = payload.get("issues") or []
            for obj in issues:
                fields = obj.get("fields") or {}
                status = (fields.get("status") or {}).get("name")
                children.append(
                    RemoteIssue(
                        key=str(obj.get("key") or ""),
                        summary=str(fields.get("summary") or ""),
                        status=str(status or ""),
                    )
                )

            start_at += len(issues)
            total = int(payload.get("total") or 0)
            if not issues or start_at >= total:
                break

        print(f"Loaded {len(children)} child issues of epic {epic_key}")
        return children
