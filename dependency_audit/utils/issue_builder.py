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

"""Ticket summary / description construction from vulnerability records."""


from collections.abc import Callable
from typing import Any

from jira_shared.templates import render_template

from .models import TicketFields, VulnerabilityRecord
from .severity import to_jira_priority
from .templates import ISSUE_DESCRIPTION_TEMPLATE


def build_ticket_summary(record: VulnerabilityRecord) -> str:
    """Build the summary line for a vulnerability ticket."""
    return f"[{(record.severity or '').upper()}] Vulnerability in {record.module_name}"


def build_description_values(record: VulnerabilityRecord) -> dict[str, Any]:
    """Build the placeholder values available to the description template.

    Keys match the record fields, plus ``*_joined`` variants for the list
    fields and the placeholder names used by older hand-written templates
    (``issue``, ``vulnerable_versions``, ``tree_versions``, ``dependents``).
    """
    affected = ", ".join(record.affected_versions)
    paths = ", ".join(record.dependency_paths)
    return {
        "id": record.id,
        "module_name": record.module_name,
        "title": record.title,
        "url": record.url,
        "severity": record.severity,
        "vulnerable_version_range": record.vulnerable_version_range or "",
        "affected_versions": list(record.affected_versions),
        "dependency_paths": list(record.dependency_paths),
        "affected_versions_joined": affected,
        "dependency_paths_joined": paths,
        # legacy names
        "issue": record.title,
        "vulnerable_versions": record.vulnerable_version_range or "",
        "tree_versions": affected,
        "dependents": paths,
    }


class TicketComposer:
    """Turns a :class:`VulnerabilityRecord` into the fields of a new Jira ticket."""

    def __init__(
        self,
        *,
        project_key: str,
        epic_key: str,
        template: str = ISSUE_DESCRIPTION_TEMPLATE,
        severity_priority_map: dict[str, str] | None = None,
        render: Callable[[str, dict[str, Any]], str] = render_template,
    ) -> None:
        self.project_key = project_key
        self.epic_key = epic_key
        self.template = template
        self.severity_priority_map = severity_priority_map or {}
        self.render = render

    def compose(self, record: VulnerabilityRecord) -> TicketFields:
        return TicketFields(
            summary=build_ticket_summary(record),
            description=self.render(self.template, build_description_values(record)),
            priority=to_jira_priority(record.severity, self.severity_priority_map),
            project_key=self.project_key,
            epic_key=self.epic_key,
        )
