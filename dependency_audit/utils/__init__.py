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


"""Dependency audit to Jira utilities.

Modules
-------
config          Command-line / environment configuration resolved into ``Config``.
models          Core dataclasses (VulnerabilityRecord, TrackedEntry, DriftPlan, SyncResult).
audit_parser    Per-Yarn-generation decoding of audit output into vulnerability records.
yarn            Yarn version detection, audit command selection, report collection.
severity        Audit severity to Jira priority mapping and user overrides.
templates       Built-in Jira description template.
issue_builder   Ticket summary / description / priority construction.
tracking_store  Atomic JSON persistence of vulnerability id to ticket key.
reconcile       Two-pass reconciliation of tracking file, epic children and scan results.
"""
