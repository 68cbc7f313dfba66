"""Tests for the mapping resolver."""

import pytest

from taskpath.locations import Layer, Loc
from taskpath.resources import (
    LocationMappings,
    MappingDocumentError,
    VirtualFile,
    apply_mappings,
    mapping_spec_from_document,
    mapping_spec_to_document,
    unbound_paths,
    virtual_tree,
)
from taskpath.resources.mapping import layers_for, parse_layer, root_layer


@pytest.fixture
def tree():
    return virtual_tree({
        ("inputs", "table"): VirtualFile.for_reading(dict, ext="csv"),
        ("outputs", "report"): VirtualFile.for_writing(str, ext="md"),
        ("models", "weights"): VirtualFile.for_read_write(bytes),
    })


class TestRootMapping:
    """Tests for mapping under a single root."""

    def test_root_layer(self):
        assert root_layer(Loc("/data"), ("a", "b")) == Layer(Loc("/data/a/b"))

    def test_paths_follow_tree(self, tree):
        bound = apply_mappings(tree, Loc("/data"))
        table = bound.lookup(("inputs", "table")).node
        assert table.layers == (Layer(Loc("/data/inputs/table"), "csv"),)

    def test_resource_without_ext(self, tree):
        bound = apply_mappings(tree, Loc("/data"))
        weights = bound.lookup(("models", "weights")).node
        assert weights.layers == (Layer(Loc("/data/models/weights")),)

    def test_grouping_nodes_stay_unbound(self, tree):
        bound = apply_mappings(tree, Loc("/data"))
        assert not bound.node.is_bound
        assert not bound.lookup(("inputs",)).node.is_bound

    def test_same_shape(self, tree):
        bound = apply_mappings(tree, Loc("/data"))
        assert [p for p, _ in bound.walk()] == [p for p, _ in tree.walk()]

    def test_idempotent(self, tree):
        spec = Loc("/data")
        assert apply_mappings(tree, spec) == apply_mappings(tree, spec)

    def test_not_mapped_by_default_stays_unbound(self):
        tree = virtual_tree({
            ("cache",): VirtualFile.for_read_write(bytes, mapped_by_default=False),
        })
        bound = apply_mappings(tree, Loc("/data"))
        assert not bound.lookup(("cache",)).node.is_bound

    def test_table_maps_resource_not_mapped_by_default(self):
        tree = virtual_tree({
            ("cache",): VirtualFile.for_read_write(bytes, mapped_by_default=False),
        })
        spec = LocationMappings.from_document({"/cache": "/tmp/cache.bin"})
        assert apply_mappings(tree, spec).lookup(("cache",)).node.is_bound

    def test_url_root(self, tree):
        bound = apply_mappings(tree, Loc.from_text("s3://bucket/run1/"))
        report = bound.lookup(("outputs", "report")).node
        assert report.layers[0].to_text() == "s3://bucket/run1/outputs/report.md"


class TestTableMapping:
    """Tests for explicit mapping tables."""

    def test_explicit_layers(self, tree):
        spec = LocationMappings.from_document({
            "/inputs/table": ["/a/table.tsv", "/b/table"],
        })
        bound = apply_mappings(tree, spec)
        table = bound.lookup(("inputs", "table")).node
        assert [layer.to_text() for layer in table.layers] == ["/a/table.tsv", "/b/table.csv"]

    def test_unmapped_paths_are_unbound(self, tree):
        spec = LocationMappings.from_document({"/inputs/table": "/a/table"})
        bound = apply_mappings(tree, spec)
        assert not bound.lookup(("outputs", "report")).node.is_bound
        assert unbound_paths(bound, tree) == [("outputs", "report"), ("models", "weights")]

    def test_parent_entry_is_not_inherited(self, tree):
        spec = LocationMappings.from_document({"/inputs": "/a"})
        bound = apply_mappings(tree, spec)
        assert not bound.lookup(("inputs", "table")).node.is_bound

    def test_null_entry_is_unbound(self, tree):
        spec = LocationMappings.from_document({"/inputs/table": None})
        bound = apply_mappings(tree, spec)
        assert not bound.lookup(("inputs", "table")).node.is_bound

    def test_root_entry_maps_unlisted_paths(self, tree):
        spec = LocationMappings.from_document({"/": "/other", "/inputs/table": "/a/table"})
        bound = apply_mappings(tree, spec)
        assert bound.lookup(("inputs", "table")).node.layers == (Layer(Loc("/a/table"), "csv"),)
        report = bound.lookup(("outputs", "report")).node
        assert report.layers == (Layer(Loc("/other/outputs/report"), "md"),)
        assert unbound_paths(bound, tree) == []

    def test_root_entry_with_dots(self, tree):
        spec = LocationMappings.from_document({"/": "/runs/v1.2"})
        report = apply_mappings(tree, spec).lookup(("outputs", "report")).node
        assert report.layers[0].to_text() == "/runs/v1.2/outputs/report.md"

    def test_root_entry_keeps_null_entries_unbound(self, tree):
        spec = LocationMappings.from_document({"/": "/other", "/inputs/table": None})
        bound = apply_mappings(tree, spec)
        assert not bound.lookup(("inputs", "table")).node.is_bound
        assert bound.lookup(("outputs", "report")).node.is_bound

    def test_root_entry_skips_resources_not_mapped_by_default(self):
        tree = virtual_tree({
            ("cache",): VirtualFile.for_read_write(bytes, mapped_by_default=False),
        })
        spec = LocationMappings.from_document({"/": "/other"})
        assert not apply_mappings(tree, spec).lookup(("cache",)).node.is_bound

    def test_layers_for_uses_default_ext(self):
        vf = VirtualFile.for_reading(dict, ext="json")
        spec = LocationMappings({("p",): [Layer(Loc("/x"))]})
        assert layers_for(("p",), vf, spec) == (Layer(Loc("/x"), "json"),)

    def test_merge_concatenates_layers(self):
        a = LocationMappings.from_document({"/p": "/a"})
        b = LocationMappings.from_document({"/p": "/b", "/q": "/c"})
        merged = a.merge(b)
        assert merged.get(("p",)) == (Layer(Loc("/a")), Layer(Loc("/b")))
        assert ("q",) in merged


class TestMappingDocuments:
    """Tests for reading and writing ``locations`` sections."""

    def test_parse_layer_forms(self):
        assert parse_layer("out/r.json") == Layer(Loc("out/r"), "json")
        assert parse_layer({"loc": "out/r", "ext": "json"}) == Layer(Loc("out/r"), "json")

    def test_parse_layer_rejects_garbage(self):
        with pytest.raises(MappingDocumentError):
            parse_layer(42)
        with pytest.raises(MappingDocumentError):
            parse_layer({"ext": "json"})

    def test_table_must_be_mapping(self):
        with pytest.raises(MappingDocumentError):
            LocationMappings.from_document(["/a"])

    def test_spec_from_document(self):
        assert mapping_spec_from_document("/data/") == Loc("/data")
        spec = mapping_spec_from_document({"/a": "/x.csv"})
        assert isinstance(spec, LocationMappings)

    def test_to_document(self):
        spec = LocationMappings({
            ("a",): [Layer(Loc("/x"), "csv")],
            ("b",): [Layer(Loc("/y")), Layer(Loc("/z"))],
            ("c",): [],
        })
        assert mapping_spec_to_document(spec) == {
            "/a": "/x.csv",
            "/b": ["/y", "/z"],
            "/c": None,
        }
        assert mapping_spec_to_document(Loc("/data")) == "/data"

    def test_document_reads_back(self):
        doc = {"/a": "/x.csv", "/b": ["/y", "/z"]}
        assert LocationMappings.from_document(doc).to_document() == doc
