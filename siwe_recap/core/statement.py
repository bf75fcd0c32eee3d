from __future__ import annotations

from typing import Dict, Iterator, List, Tuple

from .ability import AbilityName, AbilityNamespace
from .capability import Capability
from .target import Target

PREAMBLE_TEMPLATE = "I further authorize {uri} to perform the following actions on my behalf:"

LineGroup = Tuple[Target, AbilityNamespace, List[AbilityName]]


def line_groups(capability: Capability) -> Iterator[LineGroup]:
    """Yield (target, namespace, names) per target, grouped by namespace.

    Targets come in URI order; namespaces in string order; names keep the
    Ability order they have in the capability.
    """

    for target, abilities in capability.attenuations.items():
        groups: Dict[AbilityNamespace, List[AbilityName]] = {}
        for ability in abilities:
            groups.setdefault(ability.namespace, []).append(ability.name)
        for namespace in sorted(groups):
            yield target, namespace, groups[namespace]


def statement_lines(capability: Capability) -> Iterator[str]:
    for target, namespace, names in line_groups(capability):
        rendered = ", ".join(f'"{n}"' for n in names)
        yield f'"{namespace}": {rendered} for "{target}".'


def capability_statement(capability: Capability, uri: str) -> str:
    """Render the human-readable clause for ``capability`` granted to ``uri``.

    The output is a protocol constant: verifiers regenerate it and require
    the signed statement to end with exactly this text.
    """

    parts = [PREAMBLE_TEMPLATE.format(uri=uri)]
    for n, line in enumerate(statement_lines(capability), start=1):
        parts.append(f" ({n}) {line}")
    return "".join(parts)
