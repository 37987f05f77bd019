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

"""Shared low-level utilities – logging control, warning output, and the
subprocess wrapper used to invoke external tools such as ``yarn``.
"""

from __future__ import annotations

import subprocess
import sys

_verbose_enabled = False


def parse_runner_debug(raw: str | None) -> bool:
    """Interpret a ``RUNNER_DEBUG`` value as set by GitHub Actions re-runs."""
    if raw is None or raw == "":
        return False
    if raw not in {"0", "1"}:
        raise SystemExit("ERROR: RUNNER_DEBUG must be '0' or '1' when set")
    return raw == "1"


def set_verbose_enabled(value: bool) -> None:
    global _verbose_enabled
    _verbose_enabled = bool(value)


def is_verbose() -> bool:
    """Return the current verbose-logging state."""
    return _verbose_enabled


def vprint(msg: str) -> None:
    if _verbose_enabled:
        print(msg)


def warn(msg: str) -> None:
    print(f"WARN: {msg}", file=sys.stderr)


def error(msg: str) -> None:
    print(f"ERROR: {msg}", file=sys.stderr)


def run_cmd(
    cmd: list[str],
    *,
    capture_output: bool = True,
    errors: str = "strict",
) -> subprocess.CompletedProcess:
    try:
        return subprocess.run(
            cmd, check=False, capture_output=capture_output, text=True, encoding="utf-8", errors=errors
        )
    except FileNotFoundError:
        raise SystemExit(f"ERROR: {cmd[0]} not found. Install it and make sure it is on PATH.")
