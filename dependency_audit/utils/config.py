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

"""Run configuration – command-line options with environment-variable
defaults, resolved once into an immutable :class:`Config`.

Environment variables
---------------------
JIRA_BASE_URL          (required)  e.g. https://example.atlassian.net
JIRA_PROJECT_KEY       (required)  project receiving the tickets
JIRA_API_EMAIL         (required)  account used for basic auth
JIRA_API_TOKEN         (required)  API token for that account
JIRA_EPIC_KEY          (required)  epic the tickets are created under
JIRA_ISSUE_TYPE                    issue type name (default: Code Task)
TRACKING_FILE                      tracking JSON path
ISSUE_TEMPLATE_PATH                description template file
SEVERITY_PRIORITY_MAP              ``severity=priority`` overrides
RUNNER_DEBUG                       ``1`` enables verbose output

Values from a ``.env`` file are loaded first; real environment variables win.
"""

from __future__ import annotations

import argparse
import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from dotenv import find_dotenv, load_dotenv

from jira_shared.common import parse_runner_debug
from jira_shared.jira_issues import DEFAULT_ISSUE_TYPE

from .audit_parser import ScannerFormat
from .severity import parse_severity_priority_map
from .tracking_store import DEFAULT_TRACKING_FILE

# (option dest, CLI flag, environment variable)
_REQUIRED_SETTINGS: list[tuple[str, str, str]] = [
    ("jira_base_url", "--jira-base-url", "JIRA_BASE_URL"),
    ("jira_project_key", "--jira-project-key", "JIRA_PROJECT_KEY"),
    ("jira_api_email", "--jira-api-email", "JIRA_API_EMAIL"),
    ("jira_api_token", "--jira-api-token", "JIRA_API_TOKEN"),
    ("jira_epic_key", "--jira-epic-key", "JIRA_EPIC_KEY"),
]


@dataclass(frozen=True)
class Config:
    jira_base_url: str
    jira_project_key: str
    jira_api_email: str
    jira_api_token: str = field(repr=False)
    jira_epic_key: str
    jira_issue_type: str = DEFAULT_ISSUE_TYPE
    tracking_file: str = DEFAULT_TRACKING_FILE
    template_path: str | None = None
    scanner_format: ScannerFormat | None = None
    audit_file: str | None = None
    severity_priority_map: dict[str, str] = field(default_factory=dict)
    request_timeout: float = 30.0
    dry_run: bool = False
    verbose: bool = False


def load_env_file() -> None:
    """Load a ``.env`` file (searched from the working directory) without overriding the environment."""
    load_dotenv(dotenv_path=find_dotenv(usecwd=True) or None, override=False)


def add_config_args(parser: argparse.ArgumentParser, env: Mapping[str, str] | None = None) -> None:
    env = os.environ if env is None else env

    jira = parser.add_argument_group("Jira")
    jira.add_argument("--jira-base-url", default=env.get("JIRA_BASE_URL"), help="Jira base URL (default: $JIRA_BASE_URL).")
    jira.add_argument("--jira-project-key", default=env.get("JIRA_PROJECT_KEY"), help="Project key (default: $JIRA_PROJECT_KEY).")
    jira.add_argument("--jira-api-email", default=env.get("JIRA_API_EMAIL"), help="API user e-mail (default: $JIRA_API_EMAIL).")
    jira.add_argument("--jira-api-token", default=env.get("JIRA_API_TOKEN"), help="API token (default: $JIRA_API_TOKEN).")
    jira.add_argument("--jira-epic-key", default=env.get("JIRA_EPIC_KEY"), help="Tracking epic key (default: $JIRA_EPIC_KEY).")
    jira.add_argument(
        "--jira-issue-type",
        default=env.get("JIRA_ISSUE_TYPE") or DEFAULT_ISSUE_TYPE,
        help=f"Issue type of created tickets (default: $JIRA_ISSUE_TYPE or {DEFAULT_ISSUE_TYPE!r}).",
    )
    jira.add_argument(
        "--request-timeout",
        type=float,
        default=30.0,
        help="Timeout in seconds for each Jira request (default: 30).",
    )

    parser.add_argument(
        "--tracking-file",
        default=env.get("TRACKING_FILE") or DEFAULT_TRACKING_FILE,
        help=f"Tracking JSON file (default: $TRACKING_FILE or {DEFAULT_TRACKING_FILE}).",
    )
    parser.add_argument(
        "--template",
        dest="template_path",
        default=env.get("ISSUE_TEMPLATE_PATH") or None,
        help="Description template with {{ placeholders }} (default: $ISSUE_TEMPLATE_PATH or built-in).",
    )
    parser.add_argument(
        "--scanner-format",
        choices=[f.value for f in ScannerFormat],
        default=None,
        help="Audit output format; detected from `yarn --version` when omitted.",
    )
    parser.add_argument(
        "--audit-file",
        default=None,
        help="Read audit output from this file instead of running yarn.",
    )
    parser.add_argument(
        "--severity-priority-map",
        default=env.get("SEVERITY_PRIORITY_MAP", ""),
        help="Comma-separated severity=priority overrides, e.g. 'critical=Highest,low=Lowest'.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show intended actions without creating tickets or writing the tracking file.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        default=parse_runner_debug(env.get("RUNNER_DEBUG")),
        help="Verbose output (default: on when RUNNER_DEBUG=1).",
    )


def load_config(args: argparse.Namespace) -> Config:
    """Validate parsed arguments and freeze them into a :class:`Config`."""
    missing = [
        f"{flag} / ${env_name}"
        for dest, flag, env_name in _REQUIRED_SETTINGS
        if not str(getattr(args, dest, "") or "").strip()
    ]
    if missing:
        raise SystemExit("ERROR: Missing required configuration: " + ", ".join(missing))

    if args.request_timeout <= 0:
        raise SystemExit("ERROR: --request-timeout must be positive")

    return Config(
        jira_base_url=args.jira_base_url.strip().rstrip("/"),
        jira_project_key=args.jira_project_key.strip(),
        jira_api_email=args.jira_api_email.strip(),
        jira_api_token=args.jira_api_token.strip(),
        jira_epic_key=args.jira_epic_key.strip(),
        jira_issue_type=(args.jira_issue_type or DEFAULT_ISSUE_TYPE).strip(),
        tracking_file=args.tracking_file,
        template_path=args.template_path or None,
        scanner_format=ScannerFormat(args.scanner_format) if args.scanner_format else None,
        audit_file=args.audit_file or None,
        severity_priority_map=parse_severity_priority_map(args.severity_priority_map),
        request_timeout=float(args.request_timeout),
        dry_run=bool(args.dry_run),
        verbose=bool(args.verbose),
    )
