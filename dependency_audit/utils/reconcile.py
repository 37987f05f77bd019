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

"""Core sync orchestration – reconciles the tracking file with the epic's
child tickets, then creates tickets for newly reported vulnerabilities.

The run happens in two passes:

1. *Remote state*: tracking entries whose ticket vanished from the epic or
   reached a terminal status are dropped, and open children of the epic that
   nobody tracks are adopted. The result is persisted before anything else.
2. *Scan results*: every vulnerability whose id is not tracked yet gets a
   ticket; each successful creation is persisted immediately.

Pass 1 always finishes before pass 2 starts, so a vulnerability whose ticket
was closed gets exactly one replacement ticket in the same run.
"""


from collections.abc import Iterable

from jira_shared.common import is_verbose, vprint, warn
from jira_shared.gateway import IssueTrackerGateway, TrackerError
from jira_shared.models import RemoteIssue

from .issue_builder import TicketComposer
from .models import DriftPlan, SyncResult, TrackedEntry, VulnerabilityRecord
from .tracking_store import TrackingStore

ADOPTED_KEY_PREFIX = "jira:"


def adopted_key(ticket_key: str) -> str:
    """Tracking key for a child ticket that was created outside this automation."""
    return f"{ADOPTED_KEY_PREFIX}{ticket_key}"


# ---------------------------------------------------------------------------
# Pure planning
# ---------------------------------------------------------------------------

def plan_drift_correction(
    tracked: dict[str, TrackedEntry],
    children: Iterable[RemoteIssue],
) -> DriftPlan:
    """Classify every tracking entry against the epic's live children.

    Neither input is modified.
    """
    children_by_key: dict[str, RemoteIssue] = {}
    for child in children:
        if child.key:
            children_by_key.setdefault(child.key, child)

    kept: dict[str, TrackedEntry] = {}
    missing: dict[str, TrackedEntry] = {}
    terminal: dict[str, TrackedEntry] = {}

    for vuln_id, entry in tracked.items():
        child = children_by_key.get(entry.ticket_key)
        if child is None:
            missing[vuln_id] = entry
        elif child.is_terminal():
            terminal[vuln_id] = entry
        else:
            kept[vuln_id] = entry

    referenced = {entry.ticket_key for entry in kept.values()}
    adopted: dict[str, TrackedEntry] = {}
    for key, child in children_by_key.items():
        if key in referenced or child.is_terminal():
            continue
        synthetic = adopted_key(key)
        if synthetic in kept:
            continue
        adopted[synthetic] = TrackedEntry(
            vulnerability_id=synthetic,
            module_name=child.summary,
            ticket_key=key,
        )

    return DriftPlan(kept=kept, missing=missing, terminal=terminal, adopted=adopted)


def plan_new_tickets(
    tracked: dict[str, TrackedEntry],
    records: Iterable[VulnerabilityRecord],
) -> list[VulnerabilityRecord]:
    """Return the records that have no tracking entry yet, in scan order."""
    pending: list[VulnerabilityRecord] = []
    seen: set[str] = set()
    for record in records:
        if record.id in tracked or record.id in seen:
            continue
        seen.add(record.id)
        pending.append(record)
    return pending


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

class ReconciliationEngine:
    """Runs both reconciliation passes against a gateway and a tracking store."""

    def __init__(
        self,
        gateway: IssueTrackerGateway,
        store: TrackingStore,
        composer: TicketComposer,
        *,
        epic_key: str,
        dry_run: bool = False,
    ) -> None:
        self.gateway = gateway
        self.store = store
        self.composer = composer
        self.epic_key = epic_key
        self.dry_run = dry_run

    def _persist(self, tracked: dict[str, TrackedEntry], reason: str) -> None:
        if self.dry_run:
            vprint(f"DRY-RUN: would save {len(tracked)} tracked vulnerabilities ({reason})")
            return
        self.store.save(tracked)

    def _confirm_missing(self, vuln_id: str, entry: TrackedEntry) -> bool:
        """Return True when a ticket absent from the epic may be dropped."""
        try:
            status = self.gateway.get_ticket_status(entry.ticket_key)
        except TrackerError as exc:
            warn(
                f"Could not verify ticket {entry.ticket_key} for vulnerability {vuln_id} "
                f"({entry.module_name}); keeping it tracked: {exc}"
            )
            return False

        if status is None:
            print(f"Ticket {entry.ticket_key} for vulnerability {vuln_id} ({entry.module_name}) no longer exists")
        else:
            print(
                f"Ticket {entry.ticket_key} for vulnerability {vuln_id} ({entry.module_name}) "
                f"is no longer a child of epic {self.epic_key} (status={status!r})"
            )
        return True

    def reconcile_remote_state(
        self,
        tracked: dict[str, TrackedEntry],
        result: SyncResult | None = None,
    ) -> dict[str, TrackedEntry]:
        """Pass 1: align the tracking state with the epic's children."""
        try:
            children = self.gateway.list_epic_children(self.epic_key)
        except TrackerError as exc:
            warn(f"Could not list child issues of epic {self.epic_key}; tracking state left unchanged: {exc}")
            return dict(tracked)

        plan = plan_drift_correction(tracked, children)
        adjusted = dict(plan.kept)
        dropped: list[TrackedEntry] = []

        for vuln_id, entry in plan.missing.items():
            if self._confirm_missing(vuln_id, entry):
                dropped.append(entry)
            else:
                adjusted[vuln_id] = entry

        for vuln_id, entry in plan.terminal.items():
            print(f"Ticket {entry.ticket_key} for vulnerability {vuln_id} ({entry.module_name}) is closed – untracking")
            dropped.append(entry)

        for synthetic, entry in plan.adopted.items():
            print(f"Adopting untracked child issue {entry.ticket_key} ({entry.module_name!r}) as {synthetic}")
            adjusted[synthetic] = entry

        if result is not None:
            result.dropped.extend(dropped)
            result.adopted.extend(plan.adopted.values())

        if dropped or plan.adopted:
            if self.dry_run:
                print(
                    f"DRY-RUN: would drop {len(dropped)} and adopt {len(plan.adopted)} tracking entries"
                )
            self._persist(adjusted, "remote state reconciled")
        else:
            vprint(f"Tracking state is consistent with epic {self.epic_key}")

        return adjusted

    def absorb_scan_results(
        self,
        tracked: dict[str, TrackedEntry],
        records: list[VulnerabilityRecord],
        result: SyncResult | None = None,
    ) -> dict[str, TrackedEntry]:
        """Pass 2: create one ticket for every vulnerability that is not tracked yet."""
        result = result if result is not None else SyncResult()
        current = dict(tracked)

        for record in records:
            if record.id in current:
                vprint(f"Vulnerability {record.id} ({record.module_name}) already tracked.")
                result.already_tracked.append(record)

        for record in plan_new_tickets(current, records):
            fields = self.composer.compose(record)

            if self.dry_run:
                print(
                    f"DRY-RUN: create ticket for vulnerability {record.id} ({record.module_name}) "
                    f"summary={fields.summary!r} priority={fields.priority!r} parent={fields.epic_key}"
                )
                if is_verbose():
                    print("DRY-RUN: description_preview_begin")
                    print(fields.description)
                    print("DRY-RUN: description_preview_end")
                continue

            print(f"Creating Jira ticket for vulnerability {record.id} ({record.module_name})...")
            ticket_key = self.gateway.create_ticket(
                fields.project_key,
                fields.epic_key,
                fields.summary,
                fields.description,
                fields.priority,
            )
            if not ticket_key:
                warn(f"No ticket created for vulnerability {record.id} ({record.module_name}); will retry next run")
                result.failed.append(record)
                continue

            entry = TrackedEntry(
                vulnerability_id=record.id,
                module_name=record.module_name,
                ticket_key=ticket_key,
            )
            current[record.id] = entry
            result.created.append(entry)
            self._persist(current, f"tracked {record.id}")

        return current

    def run(self, records: list[VulnerabilityRecord]) -> SyncResult:
        """Load the tracking file and run both passes for *records*."""
        result = SyncResult()
        adjusted = self.reconcile_remote_state(self.store.load(), result)
        self.absorb_scan_results(adjusted, records, result)
        return result
