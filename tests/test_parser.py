"""Tests for the recursive-descent document parser."""

from __future__ import annotations

import textwrap

import pytest

import graphyaml
from graphyaml import YamlConfig
from graphyaml import YamlParser
from graphyaml import YamlSyntaxError


def _load(text: str, config: YamlConfig | None = None) -> object:
    return graphyaml.loads(textwrap.dedent(text), config)


def test_nested_mappings_and_sequences() -> None:
    data = _load(
        """
        server:
          host: localhost
          ports:
            - 80
            - 443
          tls: false
        name: demo
        """,
    )
    assert data == {
        "server": {"host": "localhost", "ports": [80, 443], "tls": False},
        "name": "demo",
    }


def test_sequence_may_sit_at_parent_key_indentation() -> None:
    data = _load(
        """
        items:
        - a
        - b
        after: 1
        """,
    )
    assert data == {"items": ["a", "b"], "after": 1}


def test_compact_mappings_inside_sequence() -> None:
    data = _load(
        """
        - name: one
          value: 1
        - name: two
          nested:
            deep: true
        """,
    )
    assert data == [
        {"name": "one", "value": 1},
        {"name": "two", "nested": {"deep": True}},
    ]


def test_compact_nested_sequences() -> None:
    data = _load(
        """
        - - a
          - b
        - c
        """,
    )
    assert data == [["a", "b"], "c"]


def test_missing_values_are_null() -> None:
    assert _load("a:\nb: 1\n") == {"a": None, "b": 1}
    assert _load("-\n- x\n") == [None, "x"]


@pytest.mark.parametrize("text", ["", "\n\n", "# only a comment\n", "---\n...\n"])
def test_empty_documents_are_null(text: str) -> None:
    assert graphyaml.parse(text) == graphyaml.NULL


def test_root_scalars() -> None:
    assert _load("42") == 42
    assert _load("hello world") == "hello world"
    assert _load("'quoted'") == "quoted"


def test_document_markers_are_optional() -> None:
    assert _load("---\na: 1\n...\n") == {"a": 1}
    assert _load("--- inline text\n") == "inline text"
    assert _load("--- |\n  line\n") == "line\n"
    assert _load("--- # comment\n- x\n") == ["x"]


def test_strict_mode_rejects_trailing_content() -> None:
    with pytest.raises(YamlSyntaxError, match="only one document"):
        _load("---\na: 1\n---\nb: 2\n")
    with pytest.raises(YamlSyntaxError, match="unexpected content after the document"):
        _load("a: 1\n...\nextra\n")


def test_lenient_mode_ignores_trailing_content() -> None:
    assert _load("a: 1\n...\nextra\n", YamlConfig.LENIENT) == {"a": 1}
    assert _load("---\na: 1\n---\nb: 2\n", YamlConfig.LENIENT) == {"a": 1}


def test_comments_outside_quotes_are_stripped() -> None:
    data = _load(
        """
        # leading comment
        a: 1 # one
        b: 'x # y'
        c: value#hash
        """,
    )
    assert data == {"a": 1, "b": "x # y", "c": "value#hash"}


def test_quoted_keys() -> None:
    assert _load("'a b': 1\n\"c: d\": 2\n") == {"a b": 1, "c: d": 2}


def test_boolean_synonyms_follow_strict_flag() -> None:
    assert _load("flag: yes\n") == {"flag": "yes"}
    assert _load("flag: yes\n", YamlConfig.LENIENT) == {"flag": True}


def test_flow_collections() -> None:
    data = _load(
        """
        a: [1, two, {b: c}]
        d: {e: [], f: null, 'g, h': "i"}
        """,
    )
    assert data == {"a": [1, "two", {"b": "c"}], "d": {"e": [], "f": None, "g, h": "i"}}


def test_flow_collection_spanning_lines() -> None:
    data = _load(
        """
        list: [
          1,
          2, # two
        ]
        map: {a: 1,
          b: 2}
        """,
    )
    assert data == {"list": [1, 2], "map": {"a": 1, "b": 2}}


def test_flow_entry_rules() -> None:
    assert _load("[a: 1, b]") == [{"a": 1}, "b"]
    assert _load("{a, b: 2}") == {"a": None, "b": 2}
    assert _load("[a, b,]") == ["a", "b"]
    assert _load("[ ]") == []


def test_empty_flow_entries_are_rejected() -> None:
    with pytest.raises(YamlSyntaxError, match="empty entry in flow sequence"):
        _load("[a, , b]")
    with pytest.raises(YamlSyntaxError, match="empty entry in flow mapping"):
        _load("{a: 1,, b: 2}")


def test_unterminated_flow_collection() -> None:
    with pytest.raises(YamlSyntaxError, match="unterminated flow collection"):
        _load("a: [1, 2\nb: 3\n")


def test_content_after_flow_collection() -> None:
    with pytest.raises(YamlSyntaxError, match="unexpected content after a flow collection"):
        _load("a: [1] x\n")


def test_literal_block_chomping() -> None:
    clip = _load("text: |\n  one\n  two\n\n\nnext: 1\n")
    keep = _load("text: |+\n  one\n\n\nnext: 1\n")
    strip = _load("text: |-\n  one\n\nnext: 1\n")
    assert clip == {"text": "one\ntwo\n", "next": 1}
    assert keep == {"text": "one\n\n\n", "next": 1}
    assert strip == {"text": "one", "next": 1}


def test_literal_block_keeps_inner_blank_lines_and_hashes() -> None:
    data = _load("text: |\n  # not a comment\n\n  last\n")
    assert data == {"text": "# not a comment\n\nlast\n"}


def test_folded_block() -> None:
    data = _load("text: >\n  one\n  two\n\n  three\n")
    assert data == {"text": "one two\nthree\n"}


def test_folded_block_keeps_more_indented_lines() -> None:
    data = _load("text: >-\n  a\n    b\n  c\n")
    assert data == {"text": "a\n  b\nc"}


def test_block_scalar_indentation_indicator() -> None:
    data = _load("text: |2\n    indented\n  base\n")
    assert data == {"text": "  indented\nbase\n"}


def test_empty_block_scalar() -> None:
    assert _load("a: |\nb: 1\n") == {"a": "", "b": 1}


def test_block_scalar_in_sequence() -> None:
    assert _load("- |\n  one\n- two\n") == ["one\n", "two"]


def test_invalid_block_scalar_header() -> None:
    with pytest.raises(YamlSyntaxError, match="invalid block scalar header"):
        _load("a: |++\n  x\n")


def test_duplicate_keys_are_rejected_by_default() -> None:
    with pytest.raises(YamlSyntaxError, match="duplicate key 'a'") as excinfo:
        _load("a: 1\na: 2\n")
    assert excinfo.value.line_no == 2


def test_duplicate_keys_last_value_wins_when_allowed() -> None:
    config = YamlConfig(allow_duplicate_keys=True)
    root = graphyaml.parse("a: 1\nb: 2\na: 3\n", config).get_as_yaml_mapping()
    assert root.keys() == ["a", "b"]
    assert root.get_as_integer("a") == 3


def test_inconsistent_indentation() -> None:
    text = """
    a:
        b: 1
      c: 2
    """
    with pytest.raises(YamlSyntaxError, match="inconsistent indentation"):
        _load(text)


def test_sequence_item_inside_mapping_is_rejected() -> None:
    with pytest.raises(YamlSyntaxError, match="unexpected sequence item inside a mapping"):
        _load("a: 1\n- b\n")


def test_missing_colon_is_rejected() -> None:
    with pytest.raises(YamlSyntaxError, match="expected a 'key: value' mapping entry"):
        _load("a: 1\nplain\n")


def test_tab_indentation_is_always_fatal() -> None:
    with pytest.raises(YamlSyntaxError, match="tabs are not allowed"):
        graphyaml.parse("a:\n\tb: 1\n", YamlConfig.LENIENT)


def test_block_scalar_keeps_tabs_after_its_indentation() -> None:
    assert _load("text: |\n  a\n  \tb\n") == {"text": "a\n\tb\n"}
    assert _load("text: >\n  a\n  \tb\n") == {"text": "a\n\tb\n"}
    with pytest.raises(YamlSyntaxError, match="tabs are not allowed") as excinfo:
        _load("text: |\n  a\n\tb\n")
    assert excinfo.value.line_no == 3


def test_unterminated_quoted_scalar() -> None:
    with pytest.raises(YamlSyntaxError, match="unterminated quoted scalar"):
        _load("a: 'open\n")


def test_nested_mapping_value_on_one_line_is_rejected() -> None:
    with pytest.raises(YamlSyntaxError, match="mapping values are not allowed here"):
        _load("a: b: c\n")


def test_reserved_indicators_cannot_start_scalars() -> None:
    with pytest.raises(YamlSyntaxError, match="cannot start a plain scalar"):
        _load("a: @handle\n")


def test_complex_keys_are_rejected() -> None:
    with pytest.raises(YamlSyntaxError, match="complex mapping keys"):
        _load("? a\n: b\n")


def test_syntax_error_carries_line_context() -> None:
    with pytest.raises(YamlSyntaxError) as excinfo:
        _load("a: 1\nb: [1, 2] tail\n")
    error = excinfo.value
    assert error.line_no == 2
    assert error.text == "b: [1, 2] tail"
    assert "(line 2)" in str(error)


def test_max_depth_guard() -> None:
    shallow = YamlConfig(max_depth=2)
    with pytest.raises(YamlSyntaxError, match="maximum depth of 2"):
        graphyaml.parse("a:\n  b:\n    c: 1\n", shallow)
    with pytest.raises(YamlSyntaxError, match="maximum depth of 2"):
        graphyaml.parse("[[[1]]]", shallow)
    assert graphyaml.loads("a:\n  b: 1\n", shallow) == {"a": {"b": 1}}


def test_merge_keys_do_not_override_explicit_keys() -> None:
    data = _load(
        """
        base: &base
          a: 1
          b: 2
        child:
          b: 3
          <<: *base
          c: 4
        """,
    )
    assert data["child"] == {"b": 3, "a": 1, "c": 4}


def test_keys_after_a_merge_override_merged_values() -> None:
    data = _load(
        """
        base: &base
          a: 1
          b: 2
        child:
          <<: *base
          b: 5
        """,
    )
    assert data["child"] == {"a": 1, "b": 5}


def test_merge_from_a_list_of_aliases() -> None:
    data = _load(
        """
        x: &x {a: 1}
        y: &y {a: 2, b: 2}
        z:
          <<: [*x, *y]
        """,
    )
    assert data["z"] == {"a": 1, "b": 2}


def test_merging_a_scalar_is_rejected() -> None:
    with pytest.raises(YamlSyntaxError, match="merge source must be a mapping"):
        _load("s: &s 1\nm:\n  <<: *s\n")


def test_quoted_merge_key_is_an_ordinary_key() -> None:
    assert _load('"<<": 1\n') == {"<<": 1}


def test_parser_can_read_the_same_input_twice() -> None:
    parser = YamlParser("a: &x [1, 2]\nb: *x\n")
    first = parser.read_document()
    second = parser.read_document()
    assert first == second
    assert len(parser.anchors) == 1
