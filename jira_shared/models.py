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

"""Tracker-side data models."""

from dataclasses import dataclass

# Workflow states after which a ticket is no longer actionable.
TERMINAL_STATUSES: frozenset[str] = frozenset({"closed", "done"})


@dataclass
class RemoteIssue:
    """Read-only projection of a Jira ticket (key, summary, workflow status)."""
    key: str
    summary: str
    status: str

    def is_terminal(self) -> bool:
        return (self.status or "").strip().lower() in TERMINAL_STATUSES
