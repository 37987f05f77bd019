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

"""Yarn integration – version detection, audit command selection, and
collecting the raw audit output (from a live run or a saved report).
"""

from __future__ import annotations

import os
import re

from jira_shared.common import run_cmd, vprint, warn

from .audit_parser import ScannerFormat

_MAJOR_RE = re.compile(r"^\s*v?(\d+)(?:\.|\s*$)")


def get_yarn_version() -> str:
    res = run_cmd(["yarn", "--version"])
    version = (res.stdout or "").strip()
    if res.returncode != 0 or not version:
        raise SystemExit(
            "ERROR: Failed to detect Yarn version. Ensure Yarn is installed and in your PATH. "
            f"{(res.stderr or '').strip()}".rstrip()
        )
    print(f"Detected Yarn version: {version}")
    return version


def detect_scanner_format(version: str) -> ScannerFormat:
    """Map a Yarn version string to the audit report family it emits."""
    m = _MAJOR_RE.match(version or "")
    if not m:
        raise SystemExit(f"ERROR: cannot determine scanner format from Yarn version {version!r}")
    major = int(m.group(1))
    if major <= 0:
        raise SystemExit(f"ERROR: unsupported Yarn version {version!r}")
    if major == 1:
        return ScannerFormat.CLASSIC
    if major in (2, 3):
        return ScannerFormat.BERRY
    return ScannerFormat.MODERN


def audit_command(fmt: ScannerFormat) -> list[str]:
    if fmt == ScannerFormat.CLASSIC:
        return ["yarn", "audit", "--json"]
    return ["yarn", "npm", "audit", "-R", "--json"]


def run_yarn_audit(fmt: ScannerFormat) -> list[str]:
    """Run the audit for *fmt* and return its stdout lines.

    Yarn exits non-zero whenever vulnerabilities are found, so the return code
    says nothing about success; only the output is used.
    """
    cmd = audit_command(fmt)
    print(f"Running {' '.join(cmd)}...")
    # Undecodable bytes become U+FFFD; such lines then fail JSON decoding and are skipped.
    res = run_cmd(cmd, errors="replace")
    vprint(f"{' '.join(cmd)} exited with code {res.returncode}")
    if (res.stderr or "").strip():
        warn(f"Error output from yarn audit: {res.stderr.strip()}")
    return (res.stdout or "").splitlines()


def read_audit_file(path: str) -> list[str]:
    """Read a previously saved audit report, one JSON document per line."""
    if not os.path.exists(path):
        raise SystemExit(f"ERROR: audit file not found: {path}")
    with open(path, "r", encoding="utf-8", errors="replace") as fh:
        lines = fh.read().splitlines()
    print(f"Loaded {len(lines)} lines of audit output from {path}")
    return lines
