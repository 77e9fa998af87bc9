"""Unit tests for the property spec table and query composition."""

import json
import tempfile
from pathlib import Path

import pytest

from propcollect.core.exceptions import ConfigurationError
from propcollect.core.graph import TraversalRule, build_traversal_graph
from propcollect.core.models import ManagedObjectRef, PropertySpec
from propcollect.core.properties import DEFAULT_PROPERTIES, PropertyTable, split_path
from propcollect.core.query import build_filter_spec, build_object_spec, build_query

ROOT = ManagedObjectRef("Folder", "group-d1")


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as td:
        yield Path(td)


class TestPropertyTable:
    """Tests for declaration validation and spec output."""

    def test_default_table(self) -> None:
        table = PropertyTable.default()
        assert table.leaf_types == ("VirtualMachine",)
        assert table.paths("VirtualMachine")[0] == "name"
        assert "guest.toolsStatus" in table.paths("VirtualMachine")

    def test_property_specs_preserve_order(self) -> None:
        table = PropertyTable(
            {"VirtualMachine": ["name", "guest.toolsStatus"], "HostSystem": ["name"]}
        )
        specs = table.property_specs()
        assert specs == [
            PropertySpec(type="VirtualMachine", path_set=("name", "guest.toolsStatus")),
            PropertySpec(type="HostSystem", path_set=("name",)),
        ]
        assert all(spec.all is False for spec in specs)

    def test_default_specs_match_declaration(self) -> None:
        (spec,) = PropertyTable(DEFAULT_PROPERTIES).property_specs()
        assert spec.type == "VirtualMachine"
        assert list(spec.path_set) == DEFAULT_PROPERTIES["VirtualMachine"]

    def test_empty_path_list_allowed(self) -> None:
        table = PropertyTable({"VirtualMachine": []})
        assert table.property_specs() == [PropertySpec(type="VirtualMachine", path_set=())]

    def test_unknown_type_has_no_paths(self) -> None:
        assert PropertyTable.default().paths("Datastore") == ()

    @pytest.mark.parametrize("path", ["", ".name", "name.", "guest..toolsStatus"])
    def test_malformed_path_rejected(self, path: str) -> None:
        with pytest.raises(ConfigurationError):
            PropertyTable({"VirtualMachine": [path]})

    def test_non_string_path_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            PropertyTable({"VirtualMachine": ["name", 3]})  # type: ignore[list-item]

    def test_paths_not_a_list_rejected(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            PropertyTable({"VirtualMachine": "name"})
        assert "list" in str(exc_info.value)

    @pytest.mark.parametrize("declarations", [["VirtualMachine"], "VirtualMachine", None])
    def test_declarations_not_a_mapping_rejected(self, declarations: object) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            PropertyTable(declarations)  # type: ignore[arg-type]
        assert "mapping" in str(exc_info.value)

    @pytest.mark.parametrize("type_name", ["", "vim.VirtualMachine"])
    def test_bad_type_name_rejected(self, type_name: str) -> None:
        with pytest.raises(ConfigurationError):
            PropertyTable({type_name: ["name"]})

    def test_split_path(self) -> None:
        assert split_path("guest.toolsStatus") == ["guest", "toolsStatus"]
        assert split_path("name") == ["name"]

    def test_to_dict(self) -> None:
        assert PropertyTable(DEFAULT_PROPERTIES).to_dict() == DEFAULT_PROPERTIES


class TestPropertyTableFiles:
    """Tests for loading declarations from files."""

    def test_from_json(self, temp_dir: Path) -> None:
        path = temp_dir / "props.json"
        path.write_text(json.dumps({"VirtualMachine": ["name", "runtime.powerState"]}))
        table = PropertyTable.from_file(path)
        assert table.paths("VirtualMachine") == ("name", "runtime.powerState")

    def test_from_toml(self, temp_dir: Path) -> None:
        path = temp_dir / "props.toml"
        path.write_text('VirtualMachine = ["name", "guest.guestState"]\nHostSystem = ["name"]\n')
        table = PropertyTable.from_file(path)
        assert table.leaf_types == ("VirtualMachine", "HostSystem")
        assert table.paths("VirtualMachine") == ("name", "guest.guestState")

    def test_missing_file(self, temp_dir: Path) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            PropertyTable.from_file(temp_dir / "missing.json")
        assert "Cannot read" in str(exc_info.value)

    def test_invalid_json(self, temp_dir: Path) -> None:
        path = temp_dir / "props.json"
        path.write_text("{not json")
        with pytest.raises(ConfigurationError) as exc_info:
            PropertyTable.from_file(path)
        assert "Invalid" in str(exc_info.value)

    def test_not_a_mapping(self, temp_dir: Path) -> None:
        path = temp_dir / "props.json"
        path.write_text('["name"]')
        with pytest.raises(ConfigurationError):
            PropertyTable.from_file(path)


class TestQuery:
    """Tests for filter spec composition."""

    def test_object_spec_carries_all_specs(self) -> None:
        graph = build_traversal_graph()
        object_spec = build_object_spec(ROOT, graph)
        assert object_spec.obj == ROOT
        assert object_spec.skip is False
        assert object_spec.select_set == graph.specs

    def test_filter_spec(self) -> None:
        graph = build_traversal_graph()
        specs = PropertyTable.default().property_specs()
        filter_spec = build_filter_spec(ROOT, graph, specs)

        assert len(filter_spec.object_set) == 1
        assert filter_spec.object_set[0].obj == ROOT
        assert filter_spec.prop_set == tuple(specs)

    def test_build_query(self) -> None:
        filter_spec = build_query(ROOT, PropertyTable.default())
        names = {spec.name for spec in filter_spec.object_set[0].select_set}
        assert "visitFolders" in names
        assert filter_spec.prop_set[0].type == "VirtualMachine"

    def test_build_query_is_repeatable(self) -> None:
        table = PropertyTable.default()
        assert build_query(ROOT, table) == build_query(ROOT, table)

    def test_build_query_propagates_bad_rules(self) -> None:
        rules = [TraversalRule("a", "Folder", "childEntity", ("nope",))]
        with pytest.raises(ConfigurationError):
            build_query(ROOT, PropertyTable.default(), rules)
