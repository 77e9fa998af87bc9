"""Integration tests for the collector pipeline and CLI."""

import json
import tempfile
from pathlib import Path
from typing import Any

import pytest
from typer.testing import CliRunner

import propcollect.transport
from propcollect.cli import app
from propcollect.core.collector import InventoryCollector
from propcollect.core.models import FilterSpec, ManagedObjectRef, RetrievalResult
from propcollect.core.properties import PropertyTable
from propcollect.transport import ReplayRetriever

runner = CliRunner()

RESPONSE = {
    "objects": [
        {
            "obj": {"type": "VirtualMachine", "value": "vm-10"},
            "propSet": [
                {"name": "name", "val": "web01"},
                {"name": "guest.toolsStatus", "val": "toolsOk"},
                {"name": "guest.guestState", "val": "running"},
            ],
        },
        {
            "obj": {"type": "VirtualMachine", "value": "vm-11"},
            "propSet": [
                {"name": "name", "val": "db01"},
                {"name": "config.uuid", "val": "4211-aa"},
                {"name": "availableField", "val": [{"key": 101, "name": "owner"}]},
            ],
        },
    ]
}


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as td:
        yield Path(td)


@pytest.fixture
def response_file(temp_dir: Path) -> Path:
    """A saved property collector response."""
    path = temp_dir / "response.json"
    path.write_text(json.dumps(RESPONSE))
    return path


class SpyRetriever(ReplayRetriever):
    """Replay retriever that keeps the filter spec it was given."""

    last_spec: FilterSpec | None = None

    def retrieve(self, filter_spec: FilterSpec) -> RetrievalResult:
        SpyRetriever.last_spec = filter_spec
        return super().retrieve(filter_spec)


class TestCollector:
    """Tests for the full query round on a replayed response."""

    def test_collect(self, response_file: Path) -> None:
        collector = InventoryCollector(ReplayRetriever(response_file), PropertyTable.default())
        mapping = collector.collect()

        assert mapping["vm-10"] == {
            "name": "web01",
            "guest": {"toolsStatus": "toolsOk", "guestState": "running"},
        }
        assert mapping["vm-11"]["config"] == {"uuid": "4211-aa"}
        assert mapping["vm-11"]["availableField"] == [{"key": 101, "name": "owner"}]

    def test_collect_trees(self, response_file: Path) -> None:
        collector = InventoryCollector(ReplayRetriever(response_file), PropertyTable.default())
        trees = collector.collect_trees()
        assert dict(trees["vm-10"].flatten()) == {
            "name": "web01",
            "guest.toolsStatus": "toolsOk",
            "guest.guestState": "running",
        }

    def test_default_root_is_root_folder(self, response_file: Path) -> None:
        retriever = SpyRetriever(response_file)
        InventoryCollector(retriever, PropertyTable.default()).collect()

        spec = SpyRetriever.last_spec
        assert spec is not None
        assert spec.object_set[0].obj == ManagedObjectRef("Folder", "group-d1")

    def test_explicit_root(self, response_file: Path) -> None:
        root = ManagedObjectRef("ResourcePool", "resgroup-8")
        collector = InventoryCollector(ReplayRetriever(response_file), PropertyTable.default())
        spec = collector.build_query(root)
        assert spec.object_set[0].obj == root

    def test_custom_property_table(self, response_file: Path) -> None:
        table = PropertyTable(
            {"VirtualMachine": ["name"], "HostSystem": ["name", "runtime.powerState"]}
        )
        spec = InventoryCollector(ReplayRetriever(response_file), table).build_query()
        assert [p.type for p in spec.prop_set] == ["VirtualMachine", "HostSystem"]


class TestAssembleCommand:
    """Tests for `propcollect assemble`."""

    def test_json_output(self, response_file: Path) -> None:
        result = runner.invoke(app, ["assemble", str(response_file), "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["vm-10"]["guest"]["guestState"] == "running"
        assert set(data) == {"vm-10", "vm-11"}

    def test_flat_json_output(self, response_file: Path) -> None:
        result = runner.invoke(app, ["assemble", str(response_file), "--json", "--flat"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["vm-10"] == {
            "name": "web01",
            "guest.toolsStatus": "toolsOk",
            "guest.guestState": "running",
        }

    def test_flat_keeps_data_object_values(self, temp_dir: Path) -> None:
        path = temp_dir / "response.json"
        path.write_text(
            json.dumps(
                {
                    "objects": [
                        {
                            "obj": {"type": "VirtualMachine", "value": "vm-10"},
                            "propSet": [
                                {"name": "config.hardware", "val": {"numCPU": 2}},
                                {"name": "guest.net", "val": {}},
                            ],
                        }
                    ]
                }
            )
        )
        result = runner.invoke(app, ["assemble", str(path), "--json", "--flat"])
        assert result.exit_code == 0
        assert json.loads(result.stdout) == {
            "vm-10": {"config.hardware": {"numCPU": 2}, "guest.net": {}}
        }

    def test_tree_output(self, response_file: Path) -> None:
        result = runner.invoke(app, ["assemble", str(response_file)])
        assert result.exit_code == 0
        assert "vm-10" in result.stdout
        assert "toolsStatus" in result.stdout
        assert "Objects: 2" in result.stdout

    def test_empty_response(self, temp_dir: Path) -> None:
        path = temp_dir / "empty.json"
        path.write_text('{"objects": []}')
        result = runner.invoke(app, ["assemble", str(path)])
        assert result.exit_code == 0
        assert "No objects found" in result.stdout

    def test_malformed_record(self, temp_dir: Path) -> None:
        path = temp_dir / "bad.json"
        path.write_text(json.dumps({"objects": [{"obj": None, "propSet": []}]}))
        result = runner.invoke(app, ["assemble", str(path), "--json"])
        assert result.exit_code == 1
        assert "without object identity" in result.output

    def test_missing_file(self, temp_dir: Path) -> None:
        result = runner.invoke(app, ["assemble", str(temp_dir / "missing.json")])
        assert result.exit_code == 1


class TestGraphCommand:
    """Tests for `propcollect graph`."""

    def test_json_output(self) -> None:
        result = runner.invoke(app, ["graph", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        names = {spec["name"] for spec in data["specs"]}
        assert data["root"] == "visitFolders"
        assert all(s in names for spec in data["specs"] for s in spec["selectSet"])
        assert ["rpToRp"] in data["cycles"]
        assert data["unreachable"] == []

    def test_table_output(self) -> None:
        result = runner.invoke(app, ["graph"])
        assert result.exit_code == 0
        assert "visitFolders" in result.stdout


class TestPropertiesCommand:
    """Tests for `propcollect properties`."""

    def test_default_table(self) -> None:
        result = runner.invoke(app, ["properties", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert "guest.toolsStatus" in data["VirtualMachine"]

    def test_table_file(self, temp_dir: Path) -> None:
        path = temp_dir / "props.toml"
        path.write_text('HostSystem = ["name", "runtime.powerState"]\n')
        result = runner.invoke(app, ["properties", "--properties", str(path)])
        assert result.exit_code == 0
        assert "HostSystem" in result.stdout
        assert "runtime.powerState" in result.stdout

    def test_invalid_table(self, temp_dir: Path) -> None:
        path = temp_dir / "props.json"
        path.write_text(json.dumps({"VirtualMachine": ["guest..toolsStatus"]}))
        result = runner.invoke(app, ["properties", "--properties", str(path)])
        assert result.exit_code == 1
        assert "malformed property path" in result.output


class TestCollectCommand:
    """Tests for `propcollect collect` with a replayed transport."""

    @pytest.fixture
    def replay_transport(self, response_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        class ReplaySession(ReplayRetriever):
            def __init__(self, settings: Any) -> None:
                super().__init__(response_file)

            def __enter__(self) -> "ReplaySession":
                return self

            def __exit__(self, *exc: object) -> None:
                return None

        monkeypatch.setattr(propcollect.transport, "VSphereRetriever", ReplaySession)
        monkeypatch.setenv("VCENTER_PASSWORD", "pw")

    def test_collect_json(self, replay_transport: None) -> None:
        result = runner.invoke(
            app, ["collect", "--host", "vc.example.com", "--user", "admin", "--json"]
        )
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["vm-10"]["name"] == "web01"

    def test_collect_with_root(self, replay_transport: None) -> None:
        result = runner.invoke(
            app,
            ["collect", "-H", "vc", "-u", "admin", "--root", "Folder:group-v3", "--json"],
        )
        assert result.exit_code == 0

    def test_collect_bad_root(self, replay_transport: None) -> None:
        result = runner.invoke(app, ["collect", "-H", "vc", "-u", "admin", "--root", "group-v3"])
        assert result.exit_code == 1
        assert "TYPE:VALUE" in result.output

    def test_collect_missing_host(self, temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("VCENTER_HOST", "")
        monkeypatch.setenv("VCENTER_USER", "")
        env_file = temp_dir / ".env"
        env_file.write_text("")
        result = runner.invoke(app, ["collect", "--env-file", str(env_file)])
        assert result.exit_code == 1
        assert "VCENTER_HOST" in result.output
