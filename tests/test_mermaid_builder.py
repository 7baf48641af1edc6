from infralyze.models.infra import Database, InfraData, Service
from infralyze.renderers.mermaid_builder import build_infra_graph, make_mermaid_diagram, render_mermaid_text


def test_services_databases_and_environment():
    infra = InfraData(
        services=[Service(name="api", type="web", runtime="node:18"), Service(name="worker", type="job")],
        databases=[Database(name="main", type="postgres")],
        environment={"PORT": "3000"},
    )
    lines = make_mermaid_diagram(infra, direction="LR")
    assert lines == [
        "graph LR",
        '  svc0["api (node:18)"]',
        '  svc1["worker (job)"]',
        '  db0[("postgres: main")]',
        '  env[/"Environment Variables"/]',
        "  svc0 --> db0",
        "  svc0 --> env",
    ]


def test_databases_without_services_have_no_edges():
    infra = InfraData(databases=[Database(name="a"), Database(name="b", type="redis")])
    g = build_infra_graph(infra)
    assert list(g.nodes) == ["db0", "db1"]
    assert g.number_of_edges() == 0


def test_empty_environment_adds_no_node():
    infra = InfraData(services=[Service(name="api")], environment={})
    assert "env" not in build_infra_graph(infra)


def test_raw_fallback_chains_top_level_keys():
    raw = {"region": "eu", "replicas": 3, "tags": ["a", "b"], "limits": {"cpu": 1}, "flag": None}
    lines = make_mermaid_diagram(InfraData(), raw, direction="TD")
    assert lines == [
        "graph TD",
        '  raw0["region: string"]',
        '  raw1["replicas: number"]',
        '  raw2["tags: array[2]"]',
        '  raw3["limits: object"]',
        '  raw4["flag: null"]',
        "  raw0 --> raw1",
        "  raw1 --> raw2",
        "  raw2 --> raw3",
        "  raw3 --> raw4",
    ]


def test_fallback_skips_canonical_keys():
    g = build_infra_graph(InfraData(), {"services": "x", "other": True})
    assert [attrs["label"] for _, attrs in g.nodes(data=True)] == ["other: boolean"]


def test_placeholder_when_nothing_renders():
    text = render_mermaid_text(make_mermaid_diagram(InfraData(services=[]), direction="TD"))
    assert text == 'graph TD\n  empty["No infrastructure components recognized"]'


def test_labels_are_escaped():
    infra = InfraData(services=[Service(name='say "hi"\nnow', type="x")])
    assert make_mermaid_diagram(infra, direction="TD")[1] == "  svc0[\"say 'hi' now (x)\"]"


def test_hash_in_labels_is_entity_encoded():
    infra = InfraData(services=[Service(name="a#35;b", type="x")])
    assert make_mermaid_diagram(infra, direction="TD")[1] == '  svc0["a#35;35;b (x)"]'
