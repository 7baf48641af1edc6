from infralyze.tools.content_type import detect_content_type


def test_extension_wins_over_content():
    assert detect_content_type("key: value", "config.json") == "json"
    assert detect_content_type('{"a": 1}', "compose.yaml") == "yaml"
    assert detect_content_type("{}", "deploy.YML") == "yaml"


def test_braces_and_brackets_sniff_as_json():
    assert detect_content_type('  {"services": []}\n', "upload") == "json"
    assert detect_content_type("[1, 2]", "data.txt") == "json"


def test_yaml_indicators():
    assert detect_content_type("---\nfoo: bar", "infra.conf") == "yaml"
    assert detect_content_type("services:\n  api: {}", "infra") == "yaml"
    assert detect_content_type("- api\n- worker", "list") == "yaml"


def test_unrecognized_content_is_unknown():
    assert detect_content_type("just some words", "notes.env") == "unknown"
    assert detect_content_type("", None) == "unknown"
    assert detect_content_type("key:value", "x") == "unknown"
