from __future__ import annotations

from datetime import UTC, datetime

import pytest

from sbomgraph.domain.errors import MergeConflictError
from sbomgraph.domain.graph import (
    EntityId,
    GraphSnapshot,
    GraphStore,
    LookupRef,
    Statement,
    TempId,
    entity_statements,
)
from sbomgraph.domain.schema import Cardinality, SchemaEntry, SchemaRegistry, Uniqueness


@pytest.fixture
def store(spdx_registry: SchemaRegistry) -> GraphStore:
    return GraphStore(spdx_registry)


def _package(label: str, uri: str, name: str, **extra: object) -> list[Statement]:
    return list(
        entity_statements(
            TempId(label),
            {"rdfa/uri": uri, "rdf/type": "spdx/Package", "spdx/name": name, **extra},
        )
    )


def test_merge_allocates_entities_and_reports_tempids(store: GraphStore) -> None:
    empty = GraphSnapshot.empty()

    report = store.merge(empty, _package("a", "urn:a", "alpha") + _package("b", "urn:b", "beta"))

    after = report.db_after
    assert report.db_before is empty
    assert after.basis_t == 1
    assert len(after) == 2
    a, b = report.tempids["a"], report.tempids["b"]
    assert a != b
    assert after.value(a, "spdx/name") == "alpha"
    assert after.resolve_unique("rdfa/uri", "urn:b") == b


def test_merge_never_touches_the_input_snapshot(store: GraphStore) -> None:
    first = store.merge(GraphSnapshot.empty(), _package("a", "urn:a", "alpha")).db_after

    second = store.merge(first, _package("a", "urn:a", "renamed")).db_after

    entity = first.resolve_unique("rdfa/uri", "urn:a")
    assert entity is not None
    assert first.value(entity, "spdx/name") == "alpha"
    assert second.value(entity, "spdx/name") == "renamed"
    assert first.basis_t == 1
    assert second.basis_t == 2


def test_identity_value_upserts_onto_existing_entity(store: GraphStore) -> None:
    first = store.merge(GraphSnapshot.empty(), _package("a", "urn:a", "alpha")).db_after

    report = store.merge(first, _package("again", "urn:a", "alpha", **{"spdx/versionInfo": "1.0"}))

    entity = report.tempids["again"]
    assert entity == first.resolve_unique("rdfa/uri", "urn:a")
    assert len(report.db_after) == 1
    assert report.db_after.value(entity, "spdx/versionInfo") == "1.0"


def test_temp_ids_sharing_an_identity_collapse(store: GraphStore) -> None:
    statements = [
        Statement(TempId("x"), "spdx/licenseId", "MIT"),
        Statement(TempId("y"), "spdx/licenseId", "MIT"),
        Statement(TempId("y"), "spdx/name", "MIT License"),
    ]

    report = store.merge(GraphSnapshot.empty(), statements)

    assert report.tempids["x"] == report.tempids["y"]
    assert len(report.db_after) == 1


def test_cardinality_one_conflict_within_a_merge(store: GraphStore) -> None:
    statements = [
        Statement(TempId("a"), "spdx/name", "alpha"),
        Statement(TempId("a"), "spdx/name", "beta"),
    ]

    with pytest.raises(MergeConflictError) as excinfo:
        store.merge(GraphSnapshot.empty(), statements)

    assert excinfo.value.statements == tuple(statements)


def test_repeating_the_same_value_is_not_a_conflict(store: GraphStore) -> None:
    statements = [
        Statement(TempId("a"), "spdx/name", "alpha"),
        Statement(TempId("a"), "spdx/name", "alpha"),
    ]

    after = store.merge(GraphSnapshot.empty(), statements).db_after

    (entity,) = after.entity_ids()
    assert after.values(entity, "spdx/name") == ("alpha",)


def test_many_valued_predicates_accumulate(store: GraphStore) -> None:
    first = store.merge(
        GraphSnapshot.empty(),
        [Statement(TempId("a"), "rdfa/uri", "urn:a"), Statement(TempId("a"), "rdf/type", "x")],
    ).db_after

    update = Statement(LookupRef("rdfa/uri", "urn:a"), "rdf/type", "y")
    after = store.merge(first, [update]).db_after

    entity = after.resolve_unique("rdfa/uri", "urn:a")
    assert entity is not None
    assert after.values(entity, "rdf/type") == ("x", "y")


def test_value_type_mismatch_is_rejected(store: GraphStore) -> None:
    bad = Statement(TempId("a"), "spdx/filesAnalyzed", "yes")

    with pytest.raises(MergeConflictError) as excinfo:
        store.merge(GraphSnapshot.empty(), [bad])

    assert excinfo.value.statements == (bad,)


def test_reference_predicates_require_references(store: GraphStore) -> None:
    with pytest.raises(MergeConflictError):
        store.merge(GraphSnapshot.empty(), [Statement(TempId("a"), "spdx/member", "MIT")])


def test_instant_values_are_accepted(store: GraphStore) -> None:
    created = datetime(2024, 6, 1, 12, tzinfo=UTC)

    after = store.merge(
        GraphSnapshot.empty(), [Statement(TempId("info"), "spdx/created", created)]
    ).db_after

    (entity,) = after.entity_ids()
    assert after.value(entity, "spdx/created") == created


def test_identity_value_owned_by_another_entity_conflicts(store: GraphStore) -> None:
    first = store.merge(
        GraphSnapshot.empty(),
        _package("a", "urn:a", "alpha") + _package("b", "urn:b", "beta"),
    ).db_after
    b = first.resolve_unique("rdfa/uri", "urn:b")
    assert b is not None

    with pytest.raises(MergeConflictError):
        store.merge(first, [Statement(b, "rdfa/uri", "urn:a")])


def test_temp_id_resolving_to_two_entities_conflicts(store: GraphStore) -> None:
    first = store.merge(
        GraphSnapshot.empty(),
        [
            Statement(TempId("a"), "rdfa/uri", "urn:a"),
            Statement(TempId("b"), "spdx/licenseId", "MIT"),
        ],
    ).db_after

    with pytest.raises(MergeConflictError):
        store.merge(
            first,
            [
                Statement(TempId("x"), "rdfa/uri", "urn:a"),
                Statement(TempId("x"), "spdx/licenseId", "MIT"),
            ],
        )


def test_lookup_refs_resolve_against_the_snapshot(store: GraphStore) -> None:
    first = store.merge(
        GraphSnapshot.empty(), [Statement(TempId("mit"), "spdx/licenseId", "MIT")]
    ).db_after

    report = store.merge(
        first,
        _package("p", "urn:p", "pkg")
        + [Statement(TempId("p"), "spdx/licenseConcluded", LookupRef("spdx/licenseId", "MIT"))],
    )

    package = report.tempids["p"]
    assert report.db_after.value(package, "spdx/licenseConcluded") == first.resolve_unique(
        "spdx/licenseId", "MIT"
    )


def test_unknown_lookup_ref_conflicts(store: GraphStore) -> None:
    with pytest.raises(MergeConflictError):
        store.merge(
            GraphSnapshot.empty(),
            [Statement(LookupRef("rdfa/uri", "urn:missing"), "spdx/name", "x")],
        )


def test_lookup_ref_on_non_identity_predicate_conflicts(store: GraphStore) -> None:
    with pytest.raises(MergeConflictError):
        store.merge(
            GraphSnapshot.empty(),
            [Statement(LookupRef("spdx/name", "x"), "spdx/versionInfo", "1")],
        )


def test_unknown_entity_id_conflicts(store: GraphStore) -> None:
    with pytest.raises(MergeConflictError):
        store.merge(GraphSnapshot.empty(), [Statement(EntityId(42), "spdx/name", "x")])


def test_dangling_temp_id_conflicts(store: GraphStore) -> None:
    dangling = Statement(TempId("a"), "spdx/licenseConcluded", TempId("nowhere"))

    with pytest.raises(MergeConflictError) as excinfo:
        store.merge(GraphSnapshot.empty(), [Statement(TempId("a"), "spdx/name", "a"), dangling])

    assert excinfo.value.statements == (dangling,)


def test_changing_identity_value_moves_the_index(store: GraphStore) -> None:
    first = store.merge(GraphSnapshot.empty(), _package("a", "urn:a", "alpha")).db_after
    entity = first.resolve_unique("rdfa/uri", "urn:a")
    assert entity is not None

    after = store.merge(first, [Statement(entity, "rdfa/uri", "urn:renamed")]).db_after

    assert after.resolve_unique("rdfa/uri", "urn:a") is None
    assert after.resolve_unique("rdfa/uri", "urn:renamed") == entity


def test_empty_merge_advances_basis(store: GraphStore) -> None:
    report = store.merge(GraphSnapshot.empty(), [])

    assert report.db_after.basis_t == 1
    assert len(report.db_after) == 0


def test_snapshot_views_are_read_only(store: GraphStore) -> None:
    after = store.merge(GraphSnapshot.empty(), _package("a", "urn:a", "alpha")).db_after
    (entity,) = after.entity_ids()

    with pytest.raises(TypeError):
        after.entities[entity] = {}  # type: ignore[index]
    with pytest.raises(TypeError):
        after.attributes(entity)["spdx/name"] = ("changed",)  # type: ignore[index]


def test_booleans_and_integers_are_distinct_values(
    store: GraphStore, spdx_registry: SchemaRegistry
) -> None:
    extra = [
        SchemaEntry("example/key", cardinality=Cardinality.ONE, unique=Uniqueness.IDENTITY),
        SchemaEntry("example/flags", cardinality=Cardinality.MANY),
    ]
    with spdx_registry.install(extra):
        report = store.merge(
            GraphSnapshot.empty(),
            [
                Statement(TempId("a"), "example/key", 1),
                Statement(TempId("a"), "example/flags", 1),
                Statement(TempId("a"), "example/flags", True),
                Statement(TempId("b"), "example/key", True),
            ],
        )
        with pytest.raises(MergeConflictError, match="cardinality-one"):
            store.merge(
                GraphSnapshot.empty(),
                [
                    Statement(TempId("c"), "example/key", 1),
                    Statement(TempId("c"), "example/key", True),
                ],
            )

    after = report.db_after
    a, b = report.tempids["a"], report.tempids["b"]
    assert a != b
    assert [type(value) for value in after.values(a, "example/flags")] == [int, bool]
    assert after.resolve_unique("example/key", 1) == a
    assert after.resolve_unique("example/key", True) == b
