from types import MappingProxyType

import pytest

from siwe_recap.core.ability import Ability
from siwe_recap.core.capability import Capability
from siwe_recap.core.codec import encode
from siwe_recap.core.exceptions import InvalidAction, InvalidNotaBene, InvalidProof, InvalidTarget
from siwe_recap.core.proofs import proof_for
from siwe_recap.core.target import Target

KV = "kepler:ens:example.eth://default/kv"
CRED = "urn:credential:type:type1"


def test_empty_capability():
    cap = Capability()
    assert cap.is_empty()
    assert cap.proofs == ()
    assert dict(cap.abilities()) == {}
    assert cap.can(KV, "kv/list") is None


def test_with_action_appends_and_keeps_duplicates():
    cap = (
        Capability()
        .with_action(KV, "kv/list", [{"limit": 1}])
        .with_action(KV, "kv/list", [{"limit": 1}, {"prefix": "a/"}])
    )
    nbs = cap.can(KV, "kv/list")
    assert [dict(nb) for nb in nbs] == [{"limit": 1}, {"limit": 1}, {"prefix": "a/"}]


def test_can_do_is_exact_lookup():
    cap = Capability().with_action(KV, "kv/list")
    assert cap.can_do(Target(KV), Ability.parse("kv/list")) == ()
    assert cap.can_do(Target(KV), Ability.parse("kv/get")) is None
    assert cap.can_do(Target(CRED), Ability.parse("kv/list")) is None


def test_can_surfaces_conversion_errors():
    cap = Capability().with_action(KV, "kv/list")
    with pytest.raises(InvalidTarget):
        cap.can("not-a-uri", "kv/list")
    with pytest.raises(InvalidAction):
        cap.can(KV, "kv-list")


def test_failed_builder_call_leaves_value_untouched():
    cap = Capability().with_action(KV, "kv/list", [{"a": 1}])

    with pytest.raises(InvalidAction):
        cap.with_actions(CRED, [("credential/present", []), ("bad action", [])])
    with pytest.raises(InvalidTarget):
        cap.with_action("nope", "kv/get")
    with pytest.raises(InvalidNotaBene):
        cap.with_action(KV, "kv/get", [{1: "non-string key"}])
    with pytest.raises(InvalidNotaBene):
        cap.with_action(KV, "kv/get", {"a": 1})

    assert cap.targets() == (Target(KV),)
    assert list(cap.abilities_for(KV)) == [Ability.parse("kv/list")]


def test_builders_return_new_values():
    base = Capability()
    grown = base.with_action(KV, "kv/list")
    assert base.is_empty()
    assert not grown.is_empty()


def test_notabenes_are_copied_on_entry():
    nb = {"paths": ["a"]}
    cap = Capability().with_action(KV, "kv/get", [nb])
    nb["paths"].append("b")
    nb["extra"] = True
    assert dict(cap.can(KV, "kv/get")[0]) == {"paths": ("a",)}


def test_read_only_proxy_notabenes_are_copied_too():
    backing = {"a": 1}
    cap = Capability().with_action(KV, "kv/get", [MappingProxyType(backing)])
    before = encode(cap)

    backing["a"] = 2
    assert encode(cap) == before
    assert cap.can(KV, "kv/get")[0]["a"] == 1


def test_nested_notabene_values_cannot_be_changed_through_lookups():
    cap = Capability().with_action(KV, "kv/get", [{"a": [1], "m": {"k": "v"}}])
    before = encode(cap)
    nb = cap.can_do(Target(KV), Ability.parse("kv/get"))[0]

    with pytest.raises(AttributeError):
        nb["a"].append(9)
    with pytest.raises(TypeError):
        nb["m"]["k"] = "changed"
    with pytest.raises(TypeError):
        nb["a"] = 2
    assert encode(cap) == before


def test_targets_cannot_forge_statement_clauses():
    with pytest.raises(InvalidTarget):
        Capability().with_action('https://a.com/x". (2) "kv": "read" for "https://b.com', "kv/write")


def test_iteration_order_is_independent_of_insertion_history():
    a = (
        Capability()
        .with_action(CRED, "credential/present")
        .with_action(KV, "kv/put")
        .with_action(KV, "kv*/read")
        .with_action(KV, "kv/get")
    )
    b = (
        Capability()
        .with_action(KV, "kv/get")
        .with_action(KV, "kv*/read")
        .with_action(KV, "kv/put")
        .with_action(CRED, "credential/present")
    )
    assert a == b
    assert [str(t) for t in a.targets()] == [KV, CRED]
    assert [str(ab) for ab in a.abilities_for(KV)] == ["kv*/read", "kv/get", "kv/put"]
    assert list(a.entries()) == list(b.entries())


def test_with_actions_groups_under_one_target():
    cap = Capability().with_actions(KV, [("kv/list", []), ("kv/get", [{"x": 1}])])
    assert cap.can(KV, "kv/list") == ()
    assert [dict(nb) for nb in cap.can(KV, "kv/get")] == [{"x": 1}]


def test_abilities_views_are_read_only():
    cap = Capability().with_action(KV, "kv/list")
    with pytest.raises(TypeError):
        cap.abilities()[Target(CRED)] = {}
    with pytest.raises(TypeError):
        cap.abilities_for(KV)[Ability.parse("kv/get")] = ()
    assert cap.abilities_for(CRED) is None


def test_proofs_are_deduplicated_and_sorted():
    p1 = proof_for(b"parent-1")
    p2 = proof_for(b"parent-2")

    cap = Capability().with_proof(p2).with_proofs([p1, str(p2), p1])
    assert len(cap.proofs) == 2
    assert [str(p) for p in cap.proofs] == sorted([str(p1), str(p2)])

    other = Capability().with_proofs([p1, p2])
    assert cap == other


def test_invalid_proof_is_rejected():
    with pytest.raises(InvalidProof):
        Capability().with_proof("definitely not a cid")


def test_merge_is_lossless_and_preserves_operand_order():
    p1 = proof_for(b"parent-1")
    p2 = proof_for(b"parent-2")
    a = Capability().with_action(KV, "kv/list", [{"n": 1}, {"n": 2}]).with_proof(p1)
    b = (
        Capability()
        .with_action(KV, "kv/list", [{"n": 3}])
        .with_action(CRED, "credential/present", [{"n": 4}])
        .with_proofs([p1, p2])
    )

    merged = a.merge(b)
    assert [dict(nb) for nb in merged.can(KV, "kv/list")] == [{"n": 1}, {"n": 2}, {"n": 3}]
    assert [dict(nb) for nb in merged.can(CRED, "credential/present")] == [{"n": 4}]
    assert sorted(str(p) for p in merged.proofs) == sorted([str(p1), str(p2)])

    # operands untouched
    assert [dict(nb) for nb in a.can(KV, "kv/list")] == [{"n": 1}, {"n": 2}]
    assert a.can(CRED, "credential/present") is None


def test_merge_grouping_does_not_matter():
    a = Capability().with_action(KV, "kv/list", [{"n": 1}])
    b = Capability().with_action(KV, "kv/list", [{"n": 2}]).with_proof(proof_for(b"b"))
    c = Capability().with_action(CRED, "credential/present").with_proof(proof_for(b"c"))

    assert a.merge(b).merge(c) == a.merge(b.merge(c))


def test_merge_rejects_non_capability():
    with pytest.raises(TypeError):
        Capability().merge({"att": {}})


def test_capability_from_mapping_validates_keys():
    cap = Capability(attenuations={KV: {"kv/list": [{"a": 1}]}})
    assert [dict(nb) for nb in cap.can(KV, "kv/list")] == [{"a": 1}]

    with pytest.raises(InvalidTarget):
        Capability(attenuations={"bad target": {"kv/list": []}})
    with pytest.raises(InvalidAction):
        Capability(attenuations={KV: {"kv": []}})
