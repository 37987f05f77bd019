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

"""Built-in Jira description template for vulnerability tickets."""

ISSUE_DESCRIPTION_TEMPLATE = """*Issue ID*: {{ id }}
*Issue*: {{ title }}
*Module*: {{ module_name }}
*Severity*: {{ severity }}
*URL*: [{{ url }}|{{ url }}]
*Vulnerable Versions*: {{ vulnerable_version_range }}
*Tree Versions*: {{ affected_versions_joined }}
*Dependents*: {{ dependency_paths_joined }}

Please address this issue as soon as possible.
"""
