"""Property spec table: which dotted paths to fetch for each leaf type."""

from __future__ import annotations

import json
import tomllib
from collections.abc import Iterator, Mapping, Sequence
from pathlib import Path

from propcollect.core.exceptions import ConfigurationError
from propcollect.core.models import PropertySpec

PATH_SEPARATOR = "."

# Key names must match the managed object type name exactly, including case.
DEFAULT_PROPERTIES: dict[str, list[str]] = {
    "VirtualMachine": [
        "name",
        "availableField",
        "value",
        "config.instanceUuid",
        "config.uuid",
        "guest.toolsStatus",
        "guest.toolsVersionStatus",
        "guest.toolsVersionStatus2",
        "guest.toolsRunningStatus",
        "guest.guestId",
        "guest.guestFamily",
        "guest.guestFullName",
        "guest.guestState",
        "guest.guestOperationsReady",
        "guest.interactiveGuestOperationsReady",
    ],
}


def split_path(path: str) -> list[str]:
    """Split a dotted property path into its segments."""
    return path.split(PATH_SEPARATOR)


def _validate_path(type_name: str, path: object) -> str:
    if not isinstance(path, str):
        raise ConfigurationError(f"{type_name}: property path must be a string, got {path!r}")
    if not path:
        raise ConfigurationError(f"{type_name}: empty property path")
    if any(not segment for segment in split_path(path)):
        raise ConfigurationError(f"{type_name}: malformed property path '{path}'")
    return path


class PropertyTable:
    """Validated mapping of leaf type name to ordered dotted paths.

    Validation happens once, on construction, so a bad declaration fails
    before any query is built.
    """

    def __init__(self, declarations: Mapping[str, Sequence[str]]) -> None:
        self._table: dict[str, tuple[str, ...]] = {}

        if not isinstance(declarations, Mapping):
            raise ConfigurationError(
                f"Property table must be a mapping of type to paths, got {declarations!r}"
            )
        for type_name, paths in declarations.items():
            if not isinstance(type_name, str) or not type_name:
                raise ConfigurationError("Leaf type name must be a non-empty string")
            if PATH_SEPARATOR in type_name:
                raise ConfigurationError(f"Leaf type name must not contain '.': '{type_name}'")
            if isinstance(paths, str) or not isinstance(paths, Sequence):
                raise ConfigurationError(f"{type_name}: expected a list of property paths")
            self._table[type_name] = tuple(_validate_path(type_name, p) for p in paths)

    @classmethod
    def from_file(cls, path: Path) -> PropertyTable:
        """Load declarations from a JSON or TOML file.

        Both formats hold one mapping of type name to a list of paths::

            VirtualMachine = ["name", "guest.toolsStatus"]
        """
        try:
            if path.suffix == ".toml":
                with path.open("rb") as f:
                    data = tomllib.load(f)
            else:
                data = json.loads(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise ConfigurationError(f"Cannot read property table {path}: {e}") from e
        except (json.JSONDecodeError, tomllib.TOMLDecodeError) as e:
            raise ConfigurationError(f"Invalid property table {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Property table {path} must be a mapping of type to paths")
        return cls(data)

    @classmethod
    def default(cls) -> PropertyTable:
        return cls(DEFAULT_PROPERTIES)

    @property
    def leaf_types(self) -> tuple[str, ...]:
        return tuple(self._table)

    def paths(self, type_name: str) -> tuple[str, ...]:
        return self._table.get(type_name, ())

    def property_specs(self) -> list[PropertySpec]:
        """One PropertySpec per declared type, declaration order."""
        return [
            PropertySpec(type=type_name, path_set=paths, all=False)
            for type_name, paths in self._table.items()
        ]

    def to_dict(self) -> dict[str, list[str]]:
        return {type_name: list(paths) for type_name, paths in self._table.items()}

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)

    def __repr__(self) -> str:
        return f"PropertyTable(types={list(self._table)})"
