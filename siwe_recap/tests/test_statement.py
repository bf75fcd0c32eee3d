from siwe_recap.core.capability import Capability
from siwe_recap.core.statement import capability_statement, line_groups, statement_lines

KV = "kepler:ens:example.eth://default/kv"
CRED = "urn:credential:type:type1"
PREAMBLE = "I further authorize did:key:example to perform the following actions on my behalf:"


def test_empty_capability_renders_preamble_only():
    assert capability_statement(Capability(), "did:key:example") == PREAMBLE


def test_statement_numbers_clauses_in_target_order():
    cap = (
        Capability()
        .with_action(CRED, "credential/present")
        .with_action(KV, "kv/list")
        .with_action(KV, "kv/get")
    )
    assert capability_statement(cap, "did:key:example") == (
        PREAMBLE
        + ' (1) "kv": "get", "list" for "kepler:ens:example.eth://default/kv".'
        + ' (2) "credential": "present" for "urn:credential:type:type1".'
    )


def test_abilities_are_grouped_by_namespace():
    cap = (
        Capability()
        .with_action(KV, "kva/get")
        .with_action(KV, "kv/read")
        .with_action(KV, "kv*/read")
        .with_action(KV, "kv/list")
    )
    groups = [(str(t), str(ns), [str(n) for n in names]) for t, ns, names in line_groups(cap)]
    assert groups == [
        (KV, "kv", ["list", "read"]),
        (KV, "kv*", ["read"]),
        (KV, "kva", ["get"]),
    ]
    assert list(statement_lines(cap)) == [
        f'"kv": "list", "read" for "{KV}".',
        f'"kv*": "read" for "{KV}".',
        f'"kva": "get" for "{KV}".',
    ]


def test_notabenes_do_not_change_the_statement():
    plain = Capability().with_action(KV, "kv/list")
    scoped = Capability().with_action(KV, "kv/list", [{"prefix": "public/"}])
    assert capability_statement(plain, "did:key:example") == capability_statement(
        scoped, "did:key:example"
    )


def test_statement_depends_on_delegee_uri():
    cap = Capability().with_action(KV, "kv/list")
    assert capability_statement(cap, "did:key:a") != capability_statement(cap, "did:key:b")
