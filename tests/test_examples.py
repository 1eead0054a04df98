"""Smoke tests that parse the bundled sample document."""

from __future__ import annotations

import pathlib

import graphyaml

FIXTURE = pathlib.Path(__file__).resolve().parent.parent / "examples" / "config_sample.yaml"


def test_sample_fixture_parses() -> None:
    text = FIXTURE.read_text(encoding="utf-8")
    data = graphyaml.loads(text)
    service = data["service"]
    assert service["port"] == 8080
    assert service["owner"] is None
    assert service["version"] == "2.4"
    assert service["description"] == (
        "Tracks stock levels across all regional warehouses.\nUpdated nightly.\n"
    )
    assert service["startup"] == "set -e\n./migrate\n./serve --port 8080\n"
    assert service["banner"] == "Inventory API\n(internal)"
    assert service["limits"] == {"cpu": "500m", "memory": "256Mi"}


def test_sample_fixture_merges_defaults() -> None:
    data = graphyaml.loads(FIXTURE.read_text(encoding="utf-8"))
    staging, production = data["environments"]
    assert staging == {
        "name": "staging",
        "retries": 3,
        "backoff": 1.5,
        "verbose": False,
        "url": "https://staging.example.com",
    }
    assert production["retries"] == 5
    assert production["regions"] == ["eu-west", "us-east"]


def test_sample_fixture_sequences_and_quoting() -> None:
    data = graphyaml.loads(FIXTURE.read_text(encoding="utf-8"))
    assert data["paths"]["logs"] == "/var/log/inventory # not a comment"
    assert data["paths"]["quoted"] == "tab\tand newline\n"
    assert data["notes"] == [
        "first",
        {"second": "nested", "third": 3},
        ["inner one", "inner two"],
    ]
    assert data["empty_list"] == []
    assert data["empty_map"] == {}


def test_sample_fixture_through_reader(tmp_path: pathlib.Path) -> None:
    target = tmp_path / "copy.yaml"
    target.write_bytes(FIXTURE.read_bytes())
    with graphyaml.YamlReader(target, graphyaml.YamlConfig.PRESERVE_ANCHORS) as reader:
        root = reader.read_document().get_as_yaml_mapping()
    assert root["defaults"].get_as_yaml_anchor().name == "defaults"
    staging = root.get_as_yaml_sequence("environments").get_as_yaml_mapping(0)
    assert staging["<<"] == graphyaml.YamlAlias("defaults")
