from __future__ import annotations

from typing import Iterable, Tuple, Union

from multiformats import CID, multihash

from .exceptions import InvalidProof

ProofLike = Union[CID, str]

# CIDv1 text form inside the canonical payload; CIDv0 only has base58btc.
CANONICAL_BASE = "base32"


def canonical_proof(cid: CID) -> CID:
    """Pin a CID to the fixed multibase used in canonical payloads."""

    if cid.version == 0:
        return cid
    return cid.set(base=CANONICAL_BASE)


def parse_proof(value: ProofLike) -> CID:
    """Read a proof given as a CID or as its multibase text."""

    if isinstance(value, CID):
        return canonical_proof(value)
    if not isinstance(value, str) or not value:
        raise InvalidProof(value)
    try:
        cid = CID.decode(value)
    except Exception as e:
        raise InvalidProof(value) from e
    return canonical_proof(cid)


def proof_text(cid: CID) -> str:
    return str(canonical_proof(cid))


def proof_for(data: bytes, *, codec: str = "raw") -> CID:
    """Derive a CIDv1 (sha2-256) for a parent delegation's bytes."""

    digest = multihash.digest(data, "sha2-256")
    return CID(CANONICAL_BASE, 1, codec, digest)


def merge_proofs(current: Iterable[CID], incoming: Iterable[ProofLike]) -> Tuple[CID, ...]:
    """Union two proof collections.

    Rules
    - Proofs are compared by their canonical text, duplicates dropped.
    - The result is sorted by canonical text so equal sets serialize
      identically whatever their insertion history.

    """

    by_text = {proof_text(c): c for c in current}
    for p in incoming:
        cid = parse_proof(p)
        by_text.setdefault(proof_text(cid), cid)
    return tuple(by_text[k] for k in sorted(by_text))
