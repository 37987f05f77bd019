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

"""Tracking file persistence – the JSON mapping of vulnerability id to the
Jira ticket tracking it.

File layout::

    {
      "1523": {"module_name": "lodash", "ticketKey": "SEC-12"}
    }

The file is always replaced as a whole. Only one run may use a given file at
a time; overlapping runs must be serialised by the caller (e.g. a CI
concurrency group).
"""

from __future__ import annotations

import contextlib
import json
import os
from pathlib import Path

from jira_shared.common import vprint, warn

from .models import TrackedEntry

DEFAULT_TRACKING_FILE = "./vulnerabilities-tracked.json"


class TrackingStore:
    def __init__(self, path: str | Path = DEFAULT_TRACKING_FILE) -> None:
        self.path = Path(path)

    def load(self) -> dict[str, TrackedEntry]:
        """Return the persisted mapping, or an empty one when no file exists yet."""
        if not self.path.exists():
            vprint(f"Tracking file {self.path} not found – starting with empty state")
            return {}

        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise SystemExit(f"ERROR: tracking file {self.path} is not valid JSON: {exc}")
        except OSError as exc:
            raise SystemExit(f"ERROR: cannot read tracking file {self.path}: {exc}")

        if not isinstance(data, dict):
            raise SystemExit(f"ERROR: tracking file {self.path} must contain a JSON object")

        entries: dict[str, TrackedEntry] = {}
        for vuln_id, obj in data.items():
            ticket_key = str(obj.get("ticketKey") or "").strip() if isinstance(obj, dict) else ""
            if not ticket_key:
                warn(f"Skipping tracking entry {vuln_id!r} without a ticket key: {obj!r}")
                continue
            entries[str(vuln_id)] = TrackedEntry(
                vulnerability_id=str(vuln_id),
                module_name=str(obj.get("module_name") or ""),
                ticket_key=ticket_key,
            )

        print(f"Loaded {len(entries)} tracked vulnerabilities from {self.path}")
        return entries

    def save(self, entries: dict[str, TrackedEntry]) -> None:
        """Atomically replace the tracking file with *entries*."""
        data = {
            vuln_id: {"module_name": entry.module_name, "ticketKey": entry.ticket_key}
            for vuln_id, entry in entries.items()
        }
        content = json.dumps(data, indent=2) + "\n"

        if self.path.parent and not self.path.parent.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            tmp.write_text(content, encoding="utf-8")
            os.replace(tmp, self.path)
        except BaseException:
            with contextlib.suppress(OSError):
                tmp.unlink()
            raise
        vprint(f"Saved {len(entries)} tracked vulnerabilities to {self.path}")
