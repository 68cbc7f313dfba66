"""Tests for path-addressed configuration overrides."""

import pytest

from taskpath.config import (
    ConfigOverrideError,
    InvalidOverrideValueError,
    MalformedPathError,
    PathNotFoundError,
    PipelineConfigSchema,
    generic_configuration_reader,
    json_type,
    override_config_from_key_values,
    parse_override,
)
from taskpath.config.overrides import override_document


class TestParseOverride:
    """Tests for parse_override."""

    def test_yaml_values(self):
        assert parse_override("a.b=3").value == 3
        assert parse_override("a=hello").value == "hello"
        assert parse_override("a=[1, 2]").value == [1, 2]
        assert parse_override("a={k: v}").value == {"k": "v"}
        assert parse_override("a=null").value is None

    def test_date_like_values_are_strings(self):
        assert parse_override("d=2024-01-01").value == "2024-01-01"
        assert parse_override("d=[2024-01-01]").value == ["2024-01-01"]

    def test_segments(self):
        assert parse_override("a.b.c=1").segments == ("a", "b", "c")

    def test_only_first_equal_separates(self):
        override = parse_override("a=x=y")
        assert override.path == "a"
        assert override.value == "x=y"

    def test_empty_path(self):
        with pytest.raises(MalformedPathError):
            parse_override("=1")

    def test_missing_equal(self):
        with pytest.raises(MalformedPathError):
            parse_override("a.b")

    def test_empty_segment(self):
        with pytest.raises(MalformedPathError):
            parse_override("a..b=1")

    def test_invalid_yaml(self):
        with pytest.raises(InvalidOverrideValueError):
            parse_override("a=[1")


class TestJsonType:
    """Tests for coarse value types."""

    def test_types(self):
        assert json_type(True) == "a bool"
        assert json_type(1) == "a number"
        assert json_type(1.5) == "a number"
        assert json_type("x") == "a string"
        assert json_type(None) == "a null"
        assert json_type({}) == "an object"
        assert json_type([]) == "an array"


class TestOverrideFold:
    """Tests for override_config_from_key_values."""

    def test_replace_same_type(self):
        warnings, doc = override_config_from_key_values({"a": {"b": 1}}, ["a.b=2"])
        assert doc == {"a": {"b": 2}}
        assert warnings == []

    def test_type_change_warning(self):
        warnings, doc = override_config_from_key_values({"x": 1}, ["x=hello"])
        assert doc == {"x": "hello"}
        assert len(warnings) == 1
        assert "`x'" in warnings[0]
        assert "number" in warnings[0]
        assert "string" in warnings[0]

    def test_new_field_warning(self):
        warnings, doc = override_config_from_key_values({"a": {}}, ["a.b=1"])
        assert doc == {"a": {"b": 1}}
        assert len(warnings) == 1
        assert "`a.b'" in warnings[0]
        assert "added" in warnings[0]

    def test_new_field_on_empty_document(self):
        warnings, doc = override_config_from_key_values({}, ["x=1"])
        assert doc == {"x": 1}
        assert len(warnings) == 1
        assert "added" in warnings[0]

    def test_left_to_right(self):
        _, doc = override_config_from_key_values({}, ["x=1", "x=2"])
        assert doc == {"x": 2}

    def test_later_override_sees_earlier(self):
        _, doc = override_config_from_key_values({}, ["a={}", "a.b=1"])
        assert doc == {"a": {"b": 1}}

    def test_warnings_in_order(self):
        warnings, _ = override_config_from_key_values({"x": 1}, ["x=s", "y=1"])
        assert len(warnings) == 2
        assert "Overriding" in warnings[0]
        assert "added" in warnings[1]

    def test_path_not_found(self):
        doc = {"a": {}}
        with pytest.raises(PathNotFoundError) as exc_info:
            override_config_from_key_values(doc, ["a.b.c=1"])
        assert exc_info.value.path == "a.b.c"
        assert exc_info.value.remainder == ("b", "c")
        assert doc == {"a": {}}

    def test_malformed_path_leaves_document(self):
        doc = {"a": 1}
        with pytest.raises(MalformedPathError) as exc_info:
            override_config_from_key_values(doc, ["a.b=2"])
        assert "malformed" in str(exc_info.value)
        assert doc == {"a": 1}

    def test_document_not_mutated(self):
        doc = {"a": {"b": 1}}
        _, new = override_config_from_key_values(doc, ["a.b=2", "a.c=3"])
        assert doc == {"a": {"b": 1}}
        assert new == {"a": {"b": 2, "c": 3}}

    def test_override_whole_section(self):
        warnings, doc = override_config_from_key_values({"a": {"b": 1}}, ["a=null"])
        assert doc == {"a": None}
        assert "an object with a null" in warnings[0]

    def test_date_like_value_keeps_string_type(self):
        warnings, doc = override_config_from_key_values({"d": "2023-01-01"}, ["d=2024-01-01"])
        assert doc == {"d": "2024-01-01"}
        assert warnings == []

    def test_warnings_collected_into_given_list(self):
        collected = ["earlier"]
        with pytest.raises(PathNotFoundError):
            override_config_from_key_values({"x": 1}, ["x=s", "y.z=1"], collected)
        assert len(collected) == 2
        assert "Overriding" in collected[1]

    def test_slash_keys(self):
        doc = {"locations": {"/inputs/table": "/a/t.csv"}}
        warnings, new = override_config_from_key_values(doc, ["locations./inputs/table=/b/t.csv"])
        assert new["locations"]["/inputs/table"] == "/b/t.csv"
        assert warnings == []


class TestOverrideDocument:
    """Tests for override_document results."""

    def test_error_keeps_earlier_warnings(self):
        result = override_document({"x": 1}, ["x=s", "y.z=1"])
        assert not result.ok
        assert result.config is None
        assert len(result.warnings) == 1
        assert "unknown nested field" in result.error

    def test_success(self):
        result = override_document({"x": 1}, ["x=2"])
        assert result.ok
        assert result.unwrap() == {"x": 2}


class TestGenericReader:
    """Tests for generic_configuration_reader."""

    def test_shortcuts_keep_command_line_order(self):
        reader = generic_configuration_reader(
            dict, shortcuts=[("loc", "l", "locations"), ("data", "d", "data")]
        )
        overrides = reader.parse_overrides([
            "-o", "a=1",
            "--loc", "/x=/y",
            "-d", "p._data=2",
            "--override", "b=2",
        ])
        assert overrides == ["a=1", "locations./x=/y", "data.p._data=2", "b=2"]

    def test_no_overrides_is_null(self):
        reader = generic_configuration_reader(dict)
        assert reader.is_null_overrides(reader.parse_overrides([]))
        assert not reader.is_null_overrides(reader.parse_overrides(["-o", "a=1"]))

    def test_decodes_after_patching(self):
        reader = generic_configuration_reader(PipelineConfigSchema, "pipeline.yaml")
        overrides = reader.parse_overrides(["-o", "data.x._data=1"])
        result = reader.merge_with_file_source({"data": {"x": {"_data": 0}}}, overrides)
        assert result.unwrap().data == {"x": {"_data": 1}}

    def test_decode_failure_is_error(self):
        reader = generic_configuration_reader(PipelineConfigSchema)
        overrides = reader.parse_overrides(["-o", "locations={bad: /x}"])
        result = reader.merge_with_file_source({}, overrides)
        assert not result.ok
        with pytest.raises(ConfigOverrideError):
            result.unwrap()

    def test_warnings_survive_decoding(self):
        reader = generic_configuration_reader(PipelineConfigSchema)
        overrides = reader.parse_overrides(["-o", "extra=1"])
        result = reader.merge_with_file_source({}, overrides)
        assert result.ok
        assert len(result.warnings) == 1
        assert result.config.section("extra") == 1

    def test_callable_decoder(self):
        reader = generic_configuration_reader(lambda doc: sorted(doc))
        result = reader.merge_with_file_source({"b": 1}, ["a=1"])
        assert result.unwrap() == ["a", "b"]
