"""Challenge registration, lookup and dependency ordering."""

from __future__ import annotations

import threading
from collections import deque
from collections.abc import Mapping, Sequence
from typing import Any, Protocol


class RegistryError(Exception):
    """Raised for registration conflicts, missing entries and bad banks."""


class CircularDependencyError(RegistryError):
    """Raised when challenges cannot be put in dependency order."""

    def __init__(self, cycle: str) -> None:
        super().__init__(f"circular dependency detected: {cycle}")
        self.cycle = cycle


class _Challenge(Protocol):
    id: str
    dependencies: Sequence[str]


class _Definition(Protocol):
    id: str
    category: str


def sorted_dependencies(
    challenges: Mapping[str, _Challenge], challenge_id: str
) -> list[str]:
    """Return the sorted dependency IDs of a challenge; empty if unknown."""
    challenge = challenges.get(challenge_id)
    if challenge is None:
        return []
    return sorted(challenge.dependencies)


def topological_sort(challenges: Mapping[str, _Challenge]) -> list[Any]:
    """Order challenges so each comes after its dependencies.

    Ties are broken by ID. Raises CircularDependencyError when no order
    exists, which includes dependencies on unknown challenges.
    """
    in_degree: dict[str, int] = {}
    dependents: dict[str, list[str]] = {}
    for cid, challenge in challenges.items():
        in_degree.setdefault(cid, 0)
        for dep in challenge.dependencies:
            in_degree[cid] += 1
            dependents.setdefault(dep, []).append(cid)

    queue = deque(sorted(cid for cid, degree in in_degree.items() if degree == 0))
    ordered = []
    while queue:
        cid = queue.popleft()
        if cid in challenges:
            ordered.append(challenges[cid])
        for dependent in sorted(dependents.get(cid, [])):
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                queue.append(dependent)

    if len(ordered) != len(challenges):
        raise CircularDependencyError(detect_cycle(challenges))
    return ordered


_WHITE, _GRAY, _BLACK = 0, 1, 2


def detect_cycle(challenges: Mapping[str, _Challenge]) -> str:
    """Describe a dependency cycle as "a -> b -> ...", or "unknown cycle"."""
    colour: dict[str, int] = {}

    for start in sorted(challenges):
        if colour.get(start, _WHITE) != _WHITE:
            continue

        # Each frame: [challenge id, its sorted deps, next dep index]
        stack: list[list[Any]] = [[start, sorted_dependencies(challenges, start), 0]]
        colour[start] = _GRAY

        while stack:
            top = stack[-1]
            node, deps, index = top
            if index >= len(deps):
                colour[node] = _BLACK
                stack.pop()
                continue

            dep = deps[index]
            top[2] += 1
            state = colour.get(dep, _WHITE)

            if state == _GRAY:
                path = [dep]
                for frame_id, _, _ in stack:
                    path.append(frame_id)
                    if frame_id == dep:
                        break
                return " -> ".join(path)

            if state == _WHITE:
                colour[dep] = _GRAY
                stack.append([dep, sorted_dependencies(challenges, dep), 0])

    return "unknown cycle"


class ChallengeRegistry:
    """Holds challenges and their declarative definitions, keyed by ID.

    Safe for use from several threads.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._challenges: dict[str, Any] = {}
        self._definitions: dict[str, Any] = {}

    def register(self, challenge: _Challenge) -> None:
        """Add a challenge; its ID must not be registered yet."""
        with self._lock:
            cid = challenge.id
            if cid in self._challenges:
                raise RegistryError(f"challenge already registered: {cid}")
            self._challenges[cid] = challenge

    def register_definition(self, definition: _Definition) -> None:
        """Add a definition; its ID must not be registered yet."""
        with self._lock:
            if definition.id in self._definitions:
                raise RegistryError(
                    f"challenge definition already registered: {definition.id}"
                )
            self._definitions[definition.id] = definition

    def get(self, challenge_id: str) -> Any:
        """Return the challenge with the given ID."""
        with self._lock:
            try:
                return self._challenges[challenge_id]
            except KeyError:
                raise RegistryError(f"challenge not found: {challenge_id}") from None

    def get_definition(self, challenge_id: str) -> Any:
        """Return the definition with the given ID."""
        with self._lock:
            try:
                return self._definitions[challenge_id]
            except KeyError:
                raise RegistryError(
                    f"challenge definition not found: {challenge_id}"
                ) from None

    def list_challenges(self) -> list[Any]:
        """Return all challenges sorted by ID."""
        with self._lock:
            return [self._challenges[cid] for cid in sorted(self._challenges)]

    def list_definitions(self) -> list[Any]:
        """Return all definitions sorted by ID."""
        with self._lock:
            return [self._definitions[cid] for cid in sorted(self._definitions)]

    def list_by_category(self, category: str) -> list[Any]:
        """Return challenges whose definition has the category, sorted by ID.

        Challenges without a definition are left out.
        """
        with self._lock:
            return [
                self._challenges[cid]
                for cid in sorted(self._challenges)
                if cid in self._definitions
                and self._definitions[cid].category == category
            ]

    def dependency_order(self) -> list[Any]:
        """Return challenges in dependency order."""
        with self._lock:
            return topological_sort(self._challenges)

    def validate_dependencies(self) -> None:
        """Raise RegistryError for the first dependency that is not registered."""
        with self._lock:
            for cid, challenge in self._challenges.items():
                for dep in challenge.dependencies:
                    if dep not in self._challenges:
                        raise RegistryError(
                            f"challenge {cid} has unregistered dependency: {dep}"
                        )

    def clear(self) -> None:
        """Remove all challenges and definitions."""
        with self._lock:
            self._challenges = {}
            self._definitions = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._challenges)


DEFAULT_REGISTRY = ChallengeRegistry()