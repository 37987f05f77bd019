import pytest

from dependency_audit.utils.issue_builder import (
    TicketComposer,
    build_description_values,
    build_ticket_summary,
)
from dependency_audit.utils.models import VulnerabilityRecord
from jira_shared.templates import load_template, render_template


def _record(**overrides) -> VulnerabilityRecord:
    data = dict(
        id="GHSA-1",
        module_name="lodash",
        title="Prototype Pollution",
        url="https://github.com/advisories/GHSA-1",
        severity="moderate",
        vulnerable_version_range="<4.17.21",
        affected_versions=["4.17.15", "4.17.19"],
        dependency_paths=["app@workspace:.", "lib@workspace:lib"],
    )
    data.update(overrides)
    return VulnerabilityRecord(**data)


def test_summary_uppercases_severity():
    assert build_ticket_summary(_record()) == "[MODERATE] Vulnerability in lodash"


def test_compose_fills_all_fields():
    composer = TicketComposer(project_key="SEC", epic_key="SEC-1")

    fields = composer.compose(_record())

    assert fields.summary == "[MODERATE] Vulnerability in lodash"
    assert fields.priority == "Medium"
    assert fields.project_key == "SEC"
    assert fields.epic_key == "SEC-1"
    assert "*Issue ID*: GHSA-1" in fields.description
    assert "*Tree Versions*: 4.17.15, 4.17.19" in fields.description
    assert "*Dependents*: app@workspace:., lib@workspace:lib" in fields.description
    assert "{{" not in fields.description


def test_default_template_uses_na_for_empty_fields():
    composer = TicketComposer(project_key="SEC", epic_key="SEC-1")
    record = _record(vulnerable_version_range=None, affected_versions=[], dependency_paths=[])

    description = composer.compose(record).description

    assert "*Vulnerable Versions*: N/A" in description
    assert "*Tree Versions*: N/A" in description
    assert "*Dependents*: N/A" in description


def test_custom_template_and_priority_overrides():
    composer = TicketComposer(
        project_key="SEC",
        epic_key="SEC-1",
        template="{{ module_name }} / {{ unknown_field }} / {{ issue }} / {{tree_versions}}",
        severity_priority_map={"moderate": "P3"},
    )

    fields = composer.compose(_record())

    assert fields.description == "lodash / N/A / Prototype Pollution / 4.17.15, 4.17.19"
    assert fields.priority == "P3"


def test_composer_uses_injected_renderer():
    calls = []

    def fake_render(template, values):
        calls.append((template, values))
        return "rendered"

    composer = TicketComposer(project_key="SEC", epic_key="SEC-1", template="T", render=fake_render)

    assert composer.compose(_record()).description == "rendered"
    assert calls[0][0] == "T"
    assert calls[0][1]["id"] == "GHSA-1"


def test_description_values_cover_record_fields_and_joined_variants():
    values = build_description_values(_record())

    for name in (
        "id",
        "module_name",
        "title",
        "url",
        "severity",
        "vulnerable_version_range",
        "affected_versions",
        "dependency_paths",
        "affected_versions_joined",
        "dependency_paths_joined",
    ):
        assert name in values
    assert values["dependency_paths_joined"] == "app@workspace:., lib@workspace:lib"


@pytest.mark.parametrize(
    "template,expected",
    [
        ("{{ a }}", "1"),
        ("{{a}}", "1"),
        ("{{ nested.b }}", "2"),
        ("{{ nested.missing }}", "N/A"),
        ("{{ empty }}", "N/A"),
        ("{{ none }}", "N/A"),
        ("{{ Issue ID }}", "N/A"),
        ("{{}}", "N/A"),
        ("{{ items }}", "x, y"),
        ("plain text", "plain text"),
    ],
)
def test_render_template(template, expected):
    values = {"a": 1, "nested": {"b": 2}, "empty": "", "none": None, "items": ["x", "y"]}
    assert render_template(template, values) == expected


def test_load_template_missing_file_is_fatal(tmp_path):
    with pytest.raises(SystemExit):
        load_template(str(tmp_path / "missing.md"))


def test_load_template_reads_file(tmp_path):
    path = tmp_path / "issue.md"
    path.write_text("Module: {{ module_name }}\n", encoding="utf-8")
    assert load_template(str(path)) == "Module: {{ module_name }}\n"
