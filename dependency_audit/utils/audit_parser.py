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

"""Audit output parsing – turning the newline-delimited JSON emitted by the
different ``yarn audit`` generations into :class:`VulnerabilityRecord` objects.

Yarn intermixes progress and summary lines with advisory lines, so every line
is decoded on its own and anything that is not an advisory yields ``None``.
"""


import json
from collections.abc import Callable, Iterable
from enum import StrEnum
from typing import Any

from jira_shared.common import vprint

from .models import VulnerabilityRecord

# ---------------------------------------------------------------------------
# ScannerFormat enum
# ---------------------------------------------------------------------------

class ScannerFormat(StrEnum):
    """Known audit report families, one per Yarn generation.

    CLASSIC  Yarn 1.x ``yarn audit --json``:
             ``{"type": "auditAdvisory", "data": {"advisory": {...}, ...}}``
    BERRY    Yarn 2.x / 3.x: ``{"advisory": {...}, "findings": [...]}``
    MODERN   Yarn 4.x ``yarn npm audit --json``:
             ``{"value": "<module>", "children": {"ID": ..., "Severity": ...}}``
    """
    CLASSIC = "classic"
    BERRY = "berry"
    MODERN = "modern"


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------

def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _text_list(value: Any) -> list[str]:
    """Normalise a scalar / list / missing value into a list of strings."""
    if value is None or value == "":
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v is not None and str(v) != ""]
    return [str(value)]


def _flatten_findings(findings: Any) -> tuple[list[str], list[str]]:
    """Return ``(versions, paths)`` collected from a ``findings`` list, in order."""
    versions: list[str] = []
    paths: list[str] = []
    if not isinstance(findings, list):
        return versions, paths
    for finding in findings:
        if not isinstance(finding, dict):
            continue
        version = _text(finding.get("version"))
        if version:
            versions.append(version)
        paths.extend(_text_list(finding.get("paths")))
    return versions, paths


def _record_from_advisory(advisory: Any, findings: Any) -> VulnerabilityRecord | None:
    if not isinstance(advisory, dict):
        return None
    advisory_id = _text(advisory.get("id"))
    if not advisory_id:
        return None

    versions, paths = _flatten_findings(findings)
    return VulnerabilityRecord(
        id=advisory_id,
        module_name=_text(advisory.get("module_name")),
        title=_text(advisory.get("title")),
        url=_text(advisory.get("url")),
        severity=_text(advisory.get("severity")),
        vulnerable_version_range=_text(advisory.get("vulnerable_versions")) or None,
        affected_versions=versions,
        dependency_paths=paths,
    )


# ---------------------------------------------------------------------------
# Per-family decoders
# ---------------------------------------------------------------------------

def decode_classic(obj: dict[str, Any]) -> VulnerabilityRecord | None:
    if obj.get("type") != "auditAdvisory":
        return None
    data = obj.get("data")
    if not isinstance(data, dict):
        return None
    advisory = data.get("advisory")
    findings = data.get("findings")
    if findings is None and isinstance(advisory, dict):
        findings = advisory.get("findings")
    return _record_from_advisory(advisory, findings)


def decode_berry(obj: dict[str, Any]) -> VulnerabilityRecord | None:
    if "advisory" not in obj:
        return None
    return _record_from_advisory(obj.get("advisory"), obj.get("findings"))


def decode_modern(obj: dict[str, Any]) -> VulnerabilityRecord | None:
    module_name = obj.get("value")
    children = obj.get("children")
    if not module_name or not isinstance(children, dict):
        return None
    advisory_id = _text(children.get("ID"))
    if not advisory_id:
        return None

    return VulnerabilityRecord(
        id=advisory_id,
        module_name=_text(module_name),
        title=_text(children.get("Issue")),
        url=_text(children.get("URL")),
        severity=_text(children.get("Severity")),
        vulnerable_version_range=_text(children.get("Vulnerable Versions")) or None,
        affected_versions=_text_list(children.get("Tree Versions")),
        dependency_paths=_text_list(children.get("Dependents")),
    )


DECODERS: dict[ScannerFormat, Callable[[dict[str, Any]], VulnerabilityRecord | None]] = {
    ScannerFormat.CLASSIC: decode_classic,
    ScannerFormat.BERRY: decode_berry,
    ScannerFormat.MODERN: decode_modern,
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def resolve_format(fmt: str) -> ScannerFormat:
    """Return the registered :class:`ScannerFormat` for *fmt* or abort."""
    try:
        resolved = ScannerFormat((fmt or "").strip().lower())
    except ValueError:
        resolved = None
    if resolved is None or resolved not in DECODERS:
        known = ", ".join(sorted(f.value for f in DECODERS))
        raise SystemExit(f"ERROR: unsupported scanner format {fmt!r} (known formats: {known})")
    return resolved


def parse_audit_line(fmt: str, line: str) -> VulnerabilityRecord | None:
    """Decode one output line, returning ``None`` when it is not an advisory."""
    decoder = DECODERS[resolve_format(fmt)]
    text = (line or "").strip()
    if not text:
        return None
    try:
        obj = json.loads(text)
    except json.JSONDecodeError:
        return None
    if not isinstance(obj, dict):
        return None
    return decoder(obj)


def parse_audit_output(fmt: str, lines: Iterable[str]) -> list[VulnerabilityRecord]:
    """Parse a whole audit report.

    Records keep the order in which their id first appeared; when an id is
    reported again the later record replaces the earlier one.
    """
    resolved = resolve_format(fmt)

    by_id: dict[str, VulnerabilityRecord] = {}
    skipped = 0
    for line in lines:
        record = parse_audit_line(resolved, line)
        if record is None:
            skipped += 1
            continue
        by_id[record.id] = record

    vprint(f"Parsed {len(by_id)} vulnerabilities from {resolved} audit output ({skipped} non-advisory lines skipped)")
    return list(by_id.values())
