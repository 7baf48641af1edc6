import json

from typer.testing import CliRunner

from infralyze.cli import app

runner = CliRunner()


def _write(tmp_path, name, text):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


def test_parse_command_prints_normalized_json(tmp_path):
    path = _write(tmp_path, "infra.json", '[{"name": "api"}, {"id": "worker"}]')
    result = runner.invoke(app, ["parse", str(path)])
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert [s["name"] for s in payload["parsed"]["services"]] == ["api", "worker"]
    assert "rawParsed" not in payload


def test_parse_command_exit_code_on_decode_error(tmp_path):
    path = _write(tmp_path, "broken.json", '{"a": }')
    result = runner.invoke(app, ["parse", str(path)])
    assert result.exit_code == 1
    assert "JSON parse error" in result.stdout


def test_diagram_command(tmp_path):
    path = _write(tmp_path, "infra.yaml", "services:\n  api:\n    image: node\ndatabases:\n  - name: main\n")
    result = runner.invoke(app, ["diagram", str(path), "--direction", "LR"])
    assert result.exit_code == 0
    assert result.stdout.splitlines()[0] == "graph LR"
    assert "  svc0 --> db0" in result.stdout.splitlines()


def test_summary_command(tmp_path):
    path = _write(tmp_path, "infra.yaml", "apps:\n  - name: a\n    type: web\n")
    result = runner.invoke(app, ["summary", str(path)])
    assert result.exit_code == 0
    assert json.loads(result.stdout)["details"]["serviceTypes"] == ["web"]


def test_export_command_writes_file(tmp_path):
    path = _write(tmp_path, "infra.yaml", "env:\n  A: 1\n")
    out_dir = tmp_path / "out"
    result = runner.invoke(app, ["export", str(path), "--kind", "parsed", "--out-dir", str(out_dir)])
    assert result.exit_code == 0
    exported = json.loads((out_dir / "infra-parsed.json").read_text(encoding="utf-8"))
    assert exported == {"environment": {"A": "1"}}


def test_missing_file_is_usage_error(tmp_path):
    result = runner.invoke(app, ["parse", str(tmp_path / "nope.json")])
    assert result.exit_code == 2
