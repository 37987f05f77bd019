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

"""Dependency-audit data models."""

from dataclasses import dataclass, field


@dataclass
class VulnerabilityRecord:
    """One audit finding, independent of the Yarn version that reported it."""
    id: str
    module_name: str
    title: str
    url: str
    severity: str
    vulnerable_version_range: str | None = None
    affected_versions: list[str] = field(default_factory=list)
    dependency_paths: list[str] = field(default_factory=list)


@dataclass
class TrackedEntry:
    """Links a vulnerability id to the Jira ticket created (or adopted) for it."""
    vulnerability_id: str
    module_name: str       # display only
    ticket_key: str


@dataclass
class TicketFields:
    summary: str
    description: str
    priority: str
    project_key: str
    epic_key: str


@dataclass
class DriftPlan:
    """Outcome of comparing the tracking file against the epic's children."""
    kept: dict[str, TrackedEntry]
    missing: dict[str, TrackedEntry]     # ticket not among the epic's children
    terminal: dict[str, TrackedEntry]    # ticket closed / done
    adopted: dict[str, TrackedEntry]     # open child without a tracking entry

    def has_drift(self) -> bool:
        return bool(self.missing or self.terminal or self.adopted)


@dataclass
class SyncResult:
    """Aggregated output of a full reconciliation run."""
    created: list[TrackedEntry] = field(default_factory=list)
    already_tracked: list[VulnerabilityRecord] = field(default_factory=list)
    failed: list[VulnerabilityRecord] = field(default_factory=list)
    dropped: list[TrackedEntry] = field(default_factory=list)
    adopted: list[TrackedEntry] = field(default_factory=list)
