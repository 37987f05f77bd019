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

"""Issue tracker capability consumed by the sync logic.

Callers depend on :class:`IssueTrackerGateway` only; the Jira REST binding
lives in :mod:`jira_shared.jira_issues`.
"""

from abc import ABC, abstractmethod

from .models import RemoteIssue


class TrackerError(RuntimeError):
    """A tracker call failed for a reason other than "ticket not found"."""


class IssueTrackerGateway(ABC):

    @abstractmethod
    def create_ticket(
        self,
        project_key: str,
        epic_key: str,
        summary: str,
        description: str,
        priority: str,
    ) -> str | None:
        """Create a ticket under *epic_key* and return its key, or ``None`` on failure."""

    @abstractmethod
    def get_ticket_status(self, ticket_key: str) -> str | None:
        """Return the workflow status name, or ``None`` when the ticket does not exist.

        Raises :class:`TrackerError` for any other failure.
        """

    @abstractmethod
    def list_epic_children(self, epic_key: str) -> list[RemoteIssue]:
        """Return every child ticket of *epic_key*.

        Raises :class:`TrackerError` when the listing cannot be completed.
        """
