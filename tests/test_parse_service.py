from infralyze.models.infra import Confidence
from infralyze.services.parse_service import parse_content, parse_file


def test_parse_json_scenario():
    content = '{"services":[{"name":"api","runtime":"node:18"}],"databases":[{"type":"postgres","port":"5432"}]}'
    result = parse_content(content, "infra.json")
    assert result.type == "json"
    assert result.parse_error is None
    payload = result.to_payload()
    assert payload["parsed"] == {
        "services": [{"name": "api", "type": "unknown", "runtime": "node:18"}],
        "databases": [{"name": "Unknown Database", "type": "postgres", "port": 5432}],
    }
    assert payload["rawParsed"]["databases"][0]["port"] == "5432"
    assert payload["validation"]["isValid"] is True
    assert payload["validation"]["confidence"] == "high"
    assert "svc0 --> db0" in result.diagram


def test_yaml_content_in_json_file_is_overridden():
    result = parse_content("key: value\n", "config.json")
    assert result.type == "yaml"
    assert result.parse_error is None
    assert result.raw_parsed == {"key": "value"}
    assert result.suggestions[0].startswith("Note: File parsed as YAML despite .json extension.")


def test_json_content_in_yaml_file_is_overridden():
    result = parse_content('{\n\t"services": []\n}', "compose.yml")
    assert result.type == "json"
    assert result.suggestions[0] == "Note: File parsed as JSON despite YAML-like extension"


def test_sniffed_type_does_not_add_note():
    result = parse_content("services:\n  web:\n    image: nginx\n", "compose")
    assert result.type == "yaml"
    assert not any(s.startswith("Note:") for s in result.suggestions)
    assert [s.name for s in result.parsed.services] == ["web"]


def test_decode_failure_keeps_file_details():
    result = parse_content('{"a": }', "broken.json")
    assert result.parse_error.startswith("JSON parse error:")
    assert "YAML parse error:" in result.parse_error
    assert result.type == "json"
    assert result.parsed is None
    assert result.raw_parsed is None
    assert result.validation is None
    assert result.preview == '{"a": }'
    assert result.size == 7
    assert result.diagram is None


def test_alias_expansion_is_reported_as_parse_error():
    levels = ["a0: &a0 [x, x, x, x, x, x, x, x, x, x]"]
    for n in range(1, 8):
        levels.append(f"a{n}: &a{n} [" + ", ".join([f"*a{n - 1}"] * 10) + "]")
    result = parse_content("\n".join(levels), "aliases.yaml")
    assert result.parse_error.startswith("YAML parse error:")
    assert "nodes" in result.parse_error
    assert result.parsed is None
    assert result.metadata is None


def test_unrecognized_object_yields_empty_parse_and_low_confidence():
    result = parse_content('{"foo": "bar"}', "x.json")
    assert result.parsed.to_dict() == {}
    assert result.validation.confidence == Confidence.LOW
    assert result.validation.detected_format == "Unknown Format"
    assert "No infrastructure components recognized" not in result.diagram
    assert 'raw0["foo: string"]' in result.diagram


def test_empty_array_root():
    result = parse_content("[]", "list.json")
    assert result.to_payload()["parsed"] == {"services": []}
    assert result.validation.detected_format == "Service Array"


def test_preview_is_truncated():
    content = "a: " + "x" * 1000
    result = parse_content(content, "big.yaml")
    assert len(result.preview) == 500
    assert result.size == len(content)


def test_metadata_is_attached():
    result = parse_content('{"db": {"password": "pw"}}', "secrets.json")
    assert result.metadata.sensitive_keys == ["db.password"]


def test_parse_file_reads_from_disk(tmp_path):
    path = tmp_path / "docker-compose.yml"
    path.write_text("version: '3'\nservices:\n  api:\n    image: node:18\n", encoding="utf-8")
    result = parse_file(str(path))
    assert result.name == "docker-compose.yml"
    assert result.size == path.stat().st_size
    assert result.parsed.services[0].runtime == "node:18"
    assert result.validation.detected_format == "Docker Compose + Generic Infrastructure"
