from __future__ import annotations

import copy
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from multiformats import CID

from .ability import Ability
from .exceptions import (
    AbilityError,
    InvalidAction,
    InvalidNamespaceUri,
    InvalidNotaBene,
    InvalidProof,
    InvalidTarget,
)
from .proofs import ProofLike, merge_proofs, proof_text
from .target import Target

# One constraint/context record attached to a single (target, ability) grant.
NotaBene = Mapping[str, Any]
AbilityMap = Mapping[Ability, Tuple[NotaBene, ...]]
Attenuations = Mapping[Target, AbilityMap]

TargetLike = Union[Target, str]
AbilityLike = Union[Ability, str]


def _convert_target(value: TargetLike) -> Target:
    try:
        return Target.coerce(value)
    except InvalidNamespaceUri as e:
        raise InvalidTarget(value) from e


def _convert_action(value: AbilityLike) -> Ability:
    try:
        return Ability.coerce(value)
    except AbilityError as e:
        raise InvalidAction(value) from e


def _freeze_value(value: Any) -> Any:
    """Recursively copy an opaque value into immutable containers.

    Mappings become read-only proxies over fresh dicts, lists and tuples
    become tuples, sets become frozensets; other values are deep-copied.
    """

    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze_value(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze_value(v) for v in value)
    if isinstance(value, (set, frozenset)):
        return frozenset(_freeze_value(v) for v in value)
    if isinstance(value, bytearray):
        return bytes(value)
    return copy.deepcopy(value)


def _freeze_notabene(nb: Any) -> NotaBene:
    """Copy a caller's constraint record into an immutable view.

    Security notes:
    - Every level is copied, proxies included, so later changes to the
      caller's objects cannot alter a built Capability.
    - Arrays are held as tuples; they encode as JSON arrays and decode
      back to tuples, so round trips compare equal.
    - Values are opaque here; serializability is checked by the codec.

    """

    if not isinstance(nb, Mapping):
        raise InvalidNotaBene(nb)
    for k in nb:
        if not isinstance(k, str):
            raise InvalidNotaBene(nb)
    return _freeze_value(nb)


def _convert_notabenes(nbs: Optional[Iterable[Any]]) -> List[NotaBene]:
    if nbs is None:
        return []
    if isinstance(nbs, (str, bytes, Mapping)):
        raise InvalidNotaBene(nbs)
    return [_freeze_notabene(nb) for nb in nbs]


def _freeze_attenuations(slots: Mapping[Any, Mapping[Any, Iterable[Any]]]) -> Attenuations:
    """Build the canonical read-only attenuation map.

    Rules
    - Targets sorted by URI text, abilities by Ability order.
    - NotaBene order within a slot is preserved.

    """

    converted: Dict[Target, Dict[Ability, List[NotaBene]]] = {}
    for raw_target, abilities in slots.items():
        target = _convert_target(raw_target)
        entry = converted.setdefault(target, {})
        for raw_ability, nbs in abilities.items():
            entry.setdefault(_convert_action(raw_ability), []).extend(_convert_notabenes(nbs))

    frozen: Dict[Target, AbilityMap] = {}
    for target in sorted(converted):
        entry = converted[target]
        frozen[target] = MappingProxyType(
            {ab: tuple(entry[ab]) for ab in sorted(entry)}
        )
    return MappingProxyType(frozen)


@dataclass(frozen=True, eq=False)
class Capability:
    """
    A set of delegated capabilities: attenuations plus supporting proofs.

    Security invariants
    - Immutable: builder methods return a new Capability
    - Inputs are converted and validated before a new value is built, so a
      failed call never leaves a partially built value behind
    - Iteration order depends on content only (targets, then abilities,
      then proofs are kept sorted)
    - Merging never drops a NotaBene or a proof
    """

    attenuations: Attenuations = field(default_factory=dict)
    proofs: Tuple[CID, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.attenuations, Mapping):
            raise TypeError("attenuations must be a mapping of target -> ability -> notabenes")
        object.__setattr__(self, "attenuations", _freeze_attenuations(self.attenuations))
        if isinstance(self.proofs, (str, CID)):
            raise InvalidProof(self.proofs)
        object.__setattr__(self, "proofs", merge_proofs((), self.proofs))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Capability):
            return NotImplemented
        return self._content() == other._content()

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Capability(targets={len(self.attenuations)}, proofs={len(self.proofs)})"

    def _content(self) -> Tuple[Any, ...]:
        att = tuple(
            (t, tuple((ab, tuple(dict(nb) for nb in nbs)) for ab, nbs in abilities.items()))
            for t, abilities in self.attenuations.items()
        )
        return att, tuple(proof_text(p) for p in self.proofs)

    def _slots(self) -> Dict[Target, Dict[Ability, List[NotaBene]]]:
        return {t: {ab: list(nbs) for ab, nbs in abs_.items()} for t, abs_ in self.attenuations.items()}

    def is_empty(self) -> bool:
        """True when no ability is granted (proofs alone do not count)."""

        return not self.attenuations

    def entries(self) -> Iterator[Tuple[Target, Ability, Tuple[NotaBene, ...]]]:
        for target, abilities in self.attenuations.items():
            for ability, nbs in abilities.items():
                yield target, ability, nbs

    # queries

    def can_do(self, target: Target, ability: Ability) -> Optional[Tuple[NotaBene, ...]]:
        """Exact lookup of the NotaBenes granted for (target, ability)."""

        abilities = self.attenuations.get(target)
        if abilities is None:
            return None
        return abilities.get(ability)

    def can(self, target: TargetLike, ability: AbilityLike) -> Optional[Tuple[NotaBene, ...]]:
        """Like ``can_do`` but accepts strings; conversion errors raise first."""

        return self.can_do(_convert_target(target), _convert_action(ability))

    def abilities(self) -> Attenuations:
        return self.attenuations

    def abilities_for(self, target: TargetLike) -> Optional[AbilityMap]:
        return self.attenuations.get(_convert_target(target))

    def targets(self) -> Tuple[Target, ...]:
        return tuple(self.attenuations)

    # builders

    def with_action(
        self,
        target: TargetLike,
        ability: AbilityLike,
        notabenes: Optional[Iterable[Mapping[str, Any]]] = (),
    ) -> "Capability":
        """Grant ``ability`` on ``target``, appending ``notabenes`` to the slot.

        Duplicate NotaBenes are retained.
        """

        return self.with_actions(target, [(ability, notabenes)])

    def with_actions(
        self,
        target: TargetLike,
        abilities: Iterable[Tuple[AbilityLike, Optional[Iterable[Mapping[str, Any]]]]],
    ) -> "Capability":
        t = _convert_target(target)
        converted = [(_convert_action(a), _convert_notabenes(nbs)) for a, nbs in abilities]

        slots = self._slots()
        entry = slots.setdefault(t, {})
        for ability, nbs in converted:
            entry.setdefault(ability, []).extend(nbs)
        return Capability(attenuations=slots, proofs=self.proofs)

    def with_proof(self, proof: ProofLike) -> "Capability":
        return self.with_proofs([proof])

    def with_proofs(self, proofs: Iterable[ProofLike]) -> "Capability":
        return Capability(attenuations=self.attenuations, proofs=merge_proofs(self.proofs, list(proofs)))

    def merge(self, other: "Capability") -> "Capability":
        """Lossless union; ``other``'s NotaBenes follow ours in shared slots."""

        if not isinstance(other, Capability):
            raise TypeError("merge requires a Capability")
        slots = self._slots()
        for target, ability, nbs in other.entries():
            slots.setdefault(target, {}).setdefault(ability, []).extend(nbs)
        return Capability(attenuations=slots, proofs=merge_proofs(self.proofs, other.proofs))
