from .ability import Ability, AbilityName, AbilityNamespace
from .capability import Capability, NotaBene
from .codec import decode, encode, from_canonical_dict, to_canonical_dict
from .proofs import parse_proof, proof_for
from .statement import capability_statement, line_groups, statement_lines
from .target import Target

__all__ = [
    "Ability",
    "AbilityName",
    "AbilityNamespace",
    "Capability",
    "NotaBene",
    "Target",
    "encode",
    "decode",
    "to_canonical_dict",
    "from_canonical_dict",
    "parse_proof",
    "proof_for",
    "capability_statement",
    "line_groups",
    "statement_lines",
]
