import json

import pytest

from infralyze.ir.normalizer import normalize_to_infra_data
from infralyze.services.export_service import build_export, export_as_json, export_filename, generate_infra_summary


INFRA = normalize_to_infra_data(
    {
        "services": [
            {"name": "api", "type": "web", "runtime": "node:18"},
            {"name": "web", "type": "web", "runtime": "node:18"},
            {"name": "jobs", "type": "worker"},
        ],
        "databases": [{"name": "main", "type": "postgres"}],
        "environment": {"A": "1", "B": "2"},
    }
)


def test_summary_counts_and_details():
    summary = generate_infra_summary(INFRA)
    assert summary.services == 3
    assert summary.databases == 1
    assert summary.environments == 2
    assert summary.total_components == 4
    assert summary.details.service_types == ["web", "worker"]
    assert summary.details.database_types == ["postgres"]
    assert summary.details.runtimes == ["node:18"]


def test_summary_export_round_trips():
    exported = json.loads(export_as_json(generate_infra_summary(INFRA)))
    assert exported["services"] == len(INFRA.services)
    assert exported["totalComponents"] == 4
    assert exported["details"]["serviceTypes"] == ["web", "worker"]


def test_export_is_pretty_printed():
    text = export_as_json({"a": [1]})
    assert text == '{\n  "a": [\n    1\n  ]\n}'


def test_parsed_export_omits_absent_sections():
    exported = json.loads(export_as_json(build_export("parsed", normalize_to_infra_data([]), [])))
    assert exported == {"services": []}


def test_raw_export_returns_tree_unchanged():
    raw = {"x": {"y": 1}}
    assert build_export("raw", None, raw) is raw


def test_unknown_export_kind():
    with pytest.raises(ValueError):
        build_export("xml", INFRA, {})


def test_export_filename():
    assert export_filename("docker-compose.yml", "summary") == "docker-compose-summary.json"
    assert export_filename("", "raw") == "infra-raw.json"
