from __future__ import annotations

from dataclasses import dataclass
from functools import total_ordering
from itertools import chain, zip_longest
from typing import Iterator, Tuple, Union

from .exceptions import InvalidCharacter, MissingSeparator

ALLOWED_CHARS = frozenset("-_.+*")
SEPARATOR = "/"


def _check_token(value: object) -> str:
    """Validate one half of an ability string.

    Security notes:
    - Empty tokens are rejected so "/" never parses.
    - '/' itself is not allowed, so the first separator is the only one.

    """

    if not isinstance(value, str):
        raise InvalidCharacter(repr(value))
    if not value or any(not (c.isalnum() or c in ALLOWED_CHARS) for c in value):
        raise InvalidCharacter(value)
    return value


@dataclass(frozen=True, order=True)
class AbilityNamespace:
    """Namespace half of an ability, e.g. ``kv`` in ``kv/list``."""

    value: str

    def __post_init__(self) -> None:
        _check_token(self.value)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, order=True)
class AbilityName:
    """Name half of an ability, e.g. ``list`` in ``kv/list``."""

    value: str

    def __post_init__(self) -> None:
        _check_token(self.value)

    def __str__(self) -> str:
        return self.value


@total_ordering
@dataclass(frozen=True)
class Ability:
    """
    A namespaced permission verb written ``namespace/name``.

    Security invariants
    - Immutable and hashable so it can key attenuation maps
    - Equality and ordering are byte-exact (case-sensitive)
    - Ordering compares ``namespace + "/" + name`` byte by byte, shorter
      first on a common prefix. '*' (0x2A) sorts before '/' (0x2F), so
      ``kv*/read`` < ``kv/list``.
    """

    namespace: AbilityNamespace
    name: AbilityName

    def __post_init__(self) -> None:
        if isinstance(self.namespace, str):
            object.__setattr__(self, "namespace", AbilityNamespace(self.namespace))
        if isinstance(self.name, str):
            object.__setattr__(self, "name", AbilityName(self.name))
        if not isinstance(self.namespace, AbilityNamespace) or not isinstance(
            self.name, AbilityName
        ):
            raise TypeError("Ability requires an AbilityNamespace and an AbilityName")

    @classmethod
    def parse(cls, text: str) -> "Ability":
        """Parse ``namespace/name``, splitting on the first '/'."""

        if not isinstance(text, str):
            raise InvalidCharacter(repr(text))
        ns, sep, name = text.partition(SEPARATOR)
        if not sep:
            raise MissingSeparator(text)
        return cls(AbilityNamespace(ns), AbilityName(name))

    @classmethod
    def coerce(cls, value: Union["Ability", str]) -> "Ability":
        if isinstance(value, Ability):
            return value
        return cls.parse(value)

    def __str__(self) -> str:
        return f"{self.namespace.value}{SEPARATOR}{self.name.value}"

    def _encoded_parts(self) -> Tuple[bytes, bytes]:
        return self.namespace.value.encode("utf-8"), self.name.value.encode("utf-8")

    def _bytes(self) -> Iterator[int]:
        ns, name = self._encoded_parts()
        return chain(ns, SEPARATOR.encode("ascii"), name)

    def compare(self, other: "Ability") -> int:
        """Three-way byte comparison without building the joined string."""

        for a, b in zip_longest(self._bytes(), other._bytes()):
            if a == b:
                continue
            # One side ran out first: it is a prefix of the other.
            if a is None:
                return -1
            if b is None:
                return 1
            return -1 if a < b else 1
        return 0

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Ability):
            return NotImplemented
        return self.compare(other) < 0
