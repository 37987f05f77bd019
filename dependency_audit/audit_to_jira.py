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

"""Promote ``yarn audit`` findings into Jira tickets under a tracking epic.

Input:
- Output of the Yarn audit command matching the installed Yarn version, or a
  saved report passed with ``--audit-file``.

Design intent:
- One ticket per advisory id, never more.
- ``vulnerabilities-tracked.json`` maps advisory ids to ticket keys and is
  committed / cached between CI runs.
- Every run first repairs drift against the epic (deleted or closed tickets
  are untracked, manually created children are adopted), then creates
  tickets for untracked advisories, saving after every ticket.

Requirements:
- Jira API token with permission to create issues in the project.
- Runs must not overlap on the same tracking file.

Draft / debug (no writes):
    `python3 -m dependency_audit.audit_to_jira --audit-file audit.jsonl --scanner-format modern --dry-run`
"""

from __future__ import annotations

import argparse

from jira_shared.common import set_verbose_enabled
from jira_shared.gateway import IssueTrackerGateway
from jira_shared.jira_issues import JiraIssueGateway
from jira_shared.templates import load_template

from dependency_audit.utils.audit_parser import ScannerFormat, parse_audit_output
from dependency_audit.utils.config import Config, add_config_args, load_config, load_env_file
from dependency_audit.utils.issue_builder import TicketComposer
from dependency_audit.utils.models import SyncResult
from dependency_audit.utils.reconcile import ReconciliationEngine
from dependency_audit.utils.templates import ISSUE_DESCRIPTION_TEMPLATE
from dependency_audit.utils.tracking_store import TrackingStore
from dependency_audit.utils.yarn import detect_scanner_format, get_yarn_version, read_audit_file, run_yarn_audit


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Create Jira tickets for yarn audit vulnerabilities")
    add_config_args(p)
    return p.parse_args(argv)


def resolve_scanner_format(config: Config) -> ScannerFormat:
    if config.scanner_format is not None:
        return config.scanner_format
    return detect_scanner_format(get_yarn_version())


def collect_audit_lines(config: Config, fmt: ScannerFormat) -> list[str]:
    if config.audit_file:
        return read_audit_file(config.audit_file)
    return run_yarn_audit(fmt)


def build_gateway(config: Config) -> JiraIssueGateway:
    return JiraIssueGateway(
        config.jira_base_url,
        config.jira_api_email,
        config.jira_api_token,
        issue_type=config.jira_issue_type,
        timeout=config.request_timeout,
    )


def build_composer(config: Config) -> TicketComposer:
    template = load_template(config.template_path) if config.template_path else ISSUE_DESCRIPTION_TEMPLATE
    return TicketComposer(
        project_key=config.jira_project_key,
        epic_key=config.jira_epic_key,
        template=template,
        severity_priority_map=config.severity_priority_map,
    )


def print_summary(result: SyncResult) -> None:
    print(
        f"Summary: created={len(result.created)} already_tracked={len(result.already_tracked)} "
        f"failed={len(result.failed)} untracked={len(result.dropped)} adopted={len(result.adopted)}"
    )
    for record in result.failed:
        print(f"  - not created: {record.id} ({record.module_name})")


def run_sync(
    config: Config,
    gateway: IssueTrackerGateway,
    composer: TicketComposer,
    lines: list[str],
    fmt: ScannerFormat,
) -> SyncResult:
    """Parse *lines* and reconcile them against Jira through *gateway*."""
    records = parse_audit_output(fmt, lines)
    print(f"Found {len(records)} vulnerabilities in audit output")

    engine = ReconciliationEngine(
        gateway,
        TrackingStore(config.tracking_file),
        composer,
        epic_key=config.jira_epic_key,
        dry_run=config.dry_run,
    )
    return engine.run(records)


def main(argv: list[str] | None = None) -> None:
    load_env_file()
    config = load_config(parse_args(argv))
    set_verbose_enabled(config.verbose)

    # Every configuration problem must surface before the first Jira call.
    composer = build_composer(config)
    fmt = resolve_scanner_format(config)
    lines = collect_audit_lines(config, fmt)

    result = run_sync(config, build_gateway(config), composer, lines, fmt)
    print_summary(result)
    print("Script completed.")


if __name__ == "__main__":
    main()
