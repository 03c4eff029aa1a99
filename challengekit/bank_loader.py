"""Loading banks of declarative challenge definitions from disk."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from challengekit.registry import ChallengeRegistry, RegistryError

_BANK_EXTENSIONS = {".json", ".yaml", ".yml"}


def _string_field(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a string")
    return value


def _list_field(data: dict[str, Any], key: str, item_type: type) -> list[Any]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list) or not all(
        isinstance(item, item_type) for item in value
    ):
        raise ValueError(f"field {key!r} must be a list of {item_type.__name__}")
    return list(value)


@dataclass
class ChallengeDefinition:
    """A declarative description of a challenge."""

    id: str
    name: str = ""
    description: str = ""
    category: str = ""
    dependencies: list[str] = field(default_factory=list)
    assertions: list[dict[str, Any]] = field(default_factory=list)
    metrics: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChallengeDefinition:
        """Build a definition from decoded JSON; unknown keys are ignored."""
        if not isinstance(data, dict):
            raise ValueError("challenge definition must be an object")
        return cls(
            id=_string_field(data, "id"),
            name=_string_field(data, "name"),
            description=_string_field(data, "description"),
            category=_string_field(data, "category"),
            dependencies=_list_field(data, "dependencies", str),
            assertions=_list_field(data, "assertions", dict),
            metrics=_list_field(data, "metrics", str),
        )


def load_definitions_from_bytes(
    registry: ChallengeRegistry, data: bytes | str, source: str
) -> None:
    """Parse a JSON bank and register each of its definitions."""
    try:
        bank = json.loads(data)
        if not isinstance(bank, dict):
            raise ValueError("bank must be an object")
        version = bank.get("version")
        if version is not None and not isinstance(version, str):
            raise ValueError("field 'version' must be a string")
        raw = bank.get("challenges")
        if raw is None:
            raw = []
        if not isinstance(raw, list):
            raise ValueError("field 'challenges' must be a list")
        definitions = [ChallengeDefinition.from_dict(item) for item in raw]
    except (ValueError, UnicodeDecodeError) as exc:
        raise RegistryError(
            f"failed to parse definitions from {source}: {exc}"
        ) from exc

    for definition in definitions:
        try:
            registry.register_definition(definition)
        except RegistryError as exc:
            raise RegistryError(
                f"definition {definition.id} from {source}: {exc}"
            ) from exc


def load_definitions_from_file(
    registry: ChallengeRegistry, path: str | os.PathLike[str]
) -> None:
    """Read a bank file and register its definitions."""
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        raise RegistryError(
            f"failed to read definitions file {path}: {exc}"
        ) from exc
    load_definitions_from_bytes(registry, data, str(path))


def load_definitions_from_dir(
    registry: ChallengeRegistry, directory: str | os.PathLike[str]
) -> None:
    """Load every .json, .yaml and .yml bank in a directory, not recursing."""
    try:
        entries = sorted(os.scandir(directory), key=lambda entry: entry.name)
    except OSError as exc:
        raise RegistryError(
            f"failed to read directory {directory}: {exc}"
        ) from exc

    for entry in entries:
        if entry.is_dir():
            continue
        if Path(entry.name).suffix.lower() not in _BANK_EXTENSIONS:
            continue
        path = os.path.join(directory, entry.name)
        try:
            load_definitions_from_file(registry, path)
        except RegistryError as exc:
            raise RegistryError(f"failed to load {path}: {exc}") from exc