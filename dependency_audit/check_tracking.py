#!/usr/bin/env python3
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

"""Check that the tracking file agrees with the child tickets of the epic.

Read-only: nothing is created in Jira and the tracking file is not written.
Exits with status 1 when the next sync would untrack or adopt entries.

Usage:
  python3 -m dependency_audit.check_tracking --tracking-file vulnerabilities-tracked.json
"""

from __future__ import annotations

import argparse

from jira_shared.common import error, set_verbose_enabled
from jira_shared.gateway import IssueTrackerGateway, TrackerError

from dependency_audit.audit_to_jira import build_gateway
from dependency_audit.utils.config import add_config_args, load_config, load_env_file
from dependency_audit.utils.models import DriftPlan
from dependency_audit.utils.reconcile import plan_drift_correction
from dependency_audit.utils.tracking_store import TrackingStore


def check_tracking(gateway: IssueTrackerGateway, store: TrackingStore, epic_key: str) -> DriftPlan:
    tracked = store.load()
    try:
        children = gateway.list_epic_children(epic_key)
    except TrackerError as exc:
        error(str(exc))
        raise SystemExit(1)
    return plan_drift_correction(tracked, children)


def report(plan: DriftPlan) -> None:
    for vuln_id, entry in plan.missing.items():
        print(f"  - {vuln_id} ({entry.module_name}): ticket {entry.ticket_key} is not a child of the epic")
    for vuln_id, entry in plan.terminal.items():
        print(f"  - {vuln_id} ({entry.module_name}): ticket {entry.ticket_key} is closed")
    for entry in plan.adopted.values():
        print(f"  - {entry.ticket_key} ({entry.module_name!r}): open child issue without tracking entry")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        description="Report drift between the tracking file and the Jira epic without changing anything",
    )
    load_env_file()
    add_config_args(parser)
    config = load_config(parser.parse_args(argv))
    set_verbose_enabled(config.verbose)

    plan = check_tracking(build_gateway(config), TrackingStore(config.tracking_file), config.jira_epic_key)

    if not plan.has_drift():
        print(f"All {len(plan.kept)} tracked vulnerabilities match open child issues of {config.jira_epic_key}")
        raise SystemExit(0)

    print(
        f"Drift detected for epic {config.jira_epic_key}: {len(plan.missing)} missing, "
        f"{len(plan.terminal)} closed, {len(plan.adopted)} untracked"
    )
    report(plan)
    raise SystemExit(1)


if __name__ == "__main__":
    main()
