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

"""Severity-to-priority mapping – translating the audit severity vocabulary
into Jira priority names, with optional user-defined overrides.
"""

from __future__ import annotations

# Audit severities whose Jira priority name differs from the severity itself.
SPECIAL_PRIORITIES: dict[str, str] = {
    "info": "Minor",
    "moderate": "Medium",
}


def parse_severity_priority_map(raw: str | None) -> dict[str, str]:
    """Parse a comma-separated ``severity=priority`` string into a dict.

    Keys are normalised to lowercase; values are kept as-is so the user
    controls the exact priority string that ends up on tickets.

    Example input:  ``"critical=Highest,high=High,moderate=Medium,low=Low"``
    """
    mapping: dict[str, str] = {}
    for pair in (raw or "").split(","):
        pair = pair.strip()
        if not pair or "=" not in pair:
            continue
        sev, pri = pair.split("=", 1)
        sev = sev.strip().lower()
        pri = pri.strip()
        if sev and pri:
            mapping[sev] = pri
    return mapping


def to_jira_priority(severity: str, overrides: dict[str, str] | None = None) -> str:
    """Return the Jira priority name for an audit *severity*.

    ``info`` and ``moderate`` (any case) map to ``Minor`` and ``Medium``.
    Everything else keeps its spelling with only the first character
    upper-cased, e.g. ``high`` -> ``High`` and ``cRITical`` -> ``CRITical``.
    Entries in *overrides* take precedence.
    """
    raw = severity or ""
    key = raw.lower()
    if overrides and key in overrides:
        return overrides[key]
    if key in SPECIAL_PRIORITIES:
        return SPECIAL_PRIORITIES[key]
    return raw[:1].upper() + raw[1:]
