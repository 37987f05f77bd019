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

"""Generic ``{{ placeholder }}`` template rendering engine."""

import os
import re
from typing import Any

PLACEHOLDER_RE = re.compile(r"\{\{(.*?)\}\}")

MISSING_VALUE = "N/A"


def _get_nested_value(data: dict[str, Any], dotted_key: str) -> Any:
    """Resolve a dot-separated key path against a nested dict."""
    cur: Any = data
    for part in (dotted_key or "").split("."):
        if not part:
            continue
        if isinstance(cur, dict) and part in cur:
            cur = cur.get(part)
        else:
            return None
    return cur


def _format_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return str(value)


def render_template(template: str, values: dict[str, Any]) -> str:
    """Replace ``{{ key }}`` placeholders in *template* with values from *values*.

    Unknown keys and empty values render as ``N/A`` so no raw placeholder
    syntax survives in the output.
    """
    def repl(match: re.Match[str]) -> str:
        key = match.group(1).strip()
        text = _format_value(_get_nested_value(values, key)) if key else ""
        return text or MISSING_VALUE

    return PLACEHOLDER_RE.sub(repl, template)


def load_template(path: str) -> str:
    if not os.path.exists(path):
        raise SystemExit(f"ERROR: issue template not found: {path}")
    with open(path, "r", encoding="utf-8") as fh:
        return fh.read()
