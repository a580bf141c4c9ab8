"""Tests for the registration report engine."""

from __future__ import annotations

import logging
from typing import Any

import pytest

from meshimport.contracts.records import RelationshipRecord, UnsuccessfulEntity
from meshimport.contracts.response import RegistryResponse
from meshimport.report.blocks import ErrorBlock, ModelHeaderBlock, SummaryBlock, TableBlock
from meshimport.report.engine import (
    COMPONENT_HEADERS,
    RELATIONSHIP_HEADERS,
    ReportEngine,
    entity_type_phrase,
    group_relationships,
    has_file_extension,
    model_names_summary,
    partition_model_names,
    unsuccessful_entity_blocks,
)


def component(name: str, model: str, category: str = "Orchestration", version: str = "v1") -> dict:
    return {
        "DisplayName": name,
        "Model": {"name": model, "category": {"name": category}, "model": {"version": version}},
    }


def relationship(
    model: str,
    kind: str = "edge",
    subtype: str = "binding",
    from_kind: str = "Role",
    to_kind: str = "ServiceAccount",
    **extra: Any,
) -> dict:
    raw = {
        "Kind": kind,
        "Subtype": subtype,
        "Model": {"name": model},
        "Selectors": [
            {"allow": {"from": [{"kind": from_kind}], "to": [{"kind": to_kind}]}},
        ],
    }
    raw.update(extra)
    return raw


def failure(names: list[str], entity_types: list[str], *description: str) -> dict:
    return {
        "name": names,
        "entityType": entity_types,
        "error": {"LongDescription": list(description)},
    }


def make_response(
    *,
    model_names: list[str],
    components: list[Any] | None = None,
    relationships: list[Any] | None = None,
    failures: list[Any] | None = None,
    counts: tuple[int, int, int] | None = None,
    message: str = "done",
) -> RegistryResponse:
    components = components or []
    relationships = relationships or []
    failures = failures or []
    if counts is None:
        counts = (len(components), len(relationships), len(failures))
    comp_count, rel_count, err_count = counts
    return RegistryResponse.model_validate(
        {
            "err_msg": message,
            "model_name": model_names,
            "entity_count": {
                "comp_count": comp_count,
                "relationship_count": rel_count,
                "total_err_count": err_count,
            },
            "entity_type_summary": {
                "successful_components": components,
                "successful_relationships": relationships,
                "unsuccessful_component_names": failures,
            },
        }
    )


class TestModelClassification:
    """Tests for model name partitioning."""

    @pytest.mark.parametrize(
        "name",
        ["a.json", "a.yaml", "a.yml", "a.tar.gz", "a.tar", "a.zip", "a.tgz"],
    )
    def test_file_extensions(self, name: str) -> None:
        assert has_file_extension(name)

    @pytest.mark.parametrize("name", ["kubernetes", "aws-ec2-controller", "model.v1", "a.gz"])
    def test_logical_names(self, name: str) -> None:
        assert not has_file_extension(name)

    def test_partition_order(self) -> None:
        """Logical names come first; each group keeps source order and repeats."""
        logical, files = partition_model_names(
            ["model-a", "file.yaml", "model-b", "", "model-a", "x.tar.gz"]
        )

        assert logical == ["model-a", "model-b", "model-a"]
        assert files == ["file.yaml", "x.tar.gz"]


class TestShortCircuit:
    """Tests for the empty-result short-circuit."""

    def test_only_summary(self) -> None:
        """Named model with no activity renders the summary alone."""
        response = make_response(
            model_names=["my-model"],
            components=[component("Pod", "my-model")],
            counts=(0, 0, 0),
            message="Nothing imported",
        )

        assert ReportEngine().build(response) == [SummaryBlock("Nothing imported")]

    def test_errors_prevent_short_circuit(self) -> None:
        response = make_response(
            model_names=["my-model"],
            failures=[failure(["my-model"], ["component"], "bad")],
            counts=(0, 0, 1),
        )

        blocks = ReportEngine().build(response)

        assert ModelHeaderBlock("my-model") in blocks


class TestReportOrdering:
    """Tests for per-model block ordering."""

    def test_logical_models_before_files(self) -> None:
        response = make_response(
            model_names=["model-a", "file.yaml", "model-b"],
            components=[
                component("A", "model-a"),
                component("F", "file.yaml"),
                component("B", "model-b"),
            ],
        )

        blocks = ReportEngine().build(response)

        assert blocks[0] == SummaryBlock("done")
        assert blocks[1] == ModelHeaderBlock("model-a")
        assert blocks[2] == TableBlock(COMPONENT_HEADERS, (("A", "Orchestration", "v1"),))
        assert blocks[3] == ModelHeaderBlock("model-b")
        assert blocks[4] == TableBlock(COMPONENT_HEADERS, (("B", "Orchestration", "v1"),))
        # File references get no MODEL header
        assert blocks[5] == TableBlock(COMPONENT_HEADERS, (("F", "Orchestration", "v1"),))
        assert len(blocks) == 6

    def test_duplicate_model_names_repeat(self) -> None:
        """Each occurrence of a name renders its own detail."""
        response = make_response(
            model_names=["m", "m"],
            components=[component("Pod", "m")],
        )

        blocks = ReportEngine().build(response)

        assert blocks.count(ModelHeaderBlock("m")) == 2
        assert sum(isinstance(b, TableBlock) for b in blocks) == 2

    def test_no_rows_no_table(self) -> None:
        """A model with no surviving components gets no table."""
        response = make_response(
            model_names=["m", "other"],
            components=[component("Pod", "other")],
        )

        blocks = ReportEngine().build(response)

        assert blocks[1] == ModelHeaderBlock("m")
        assert blocks[2] == ModelHeaderBlock("other")

    def test_component_rows_keep_source_order(self) -> None:
        response = make_response(
            model_names=["m"],
            components=[
                component("Service", "m"),
                component("Pod", "m", version="v2"),
                component("Ignored", "x"),
            ],
        )

        table = ReportEngine().build(response)[2]

        assert isinstance(table, TableBlock)
        assert table.rows == (("Service", "Orchestration", "v1"), ("Pod", "Orchestration", "v2"))


class TestRelationships:
    """Tests for relationship grouping and dedup."""

    def test_dedup_identical_tuple(self) -> None:
        """Records differing only outside (kind, subtype, from, to) collapse to one row."""
        response = make_response(
            model_names=["m"],
            relationships=[
                relationship("m", Id="1", Version="v1"),
                relationship("m", Id="2", Version="v2"),
            ],
        )

        tables = [b for b in ReportEngine().build(response) if isinstance(b, TableBlock)]

        assert tables == [
            TableBlock(
                headers=RELATIONSHIP_HEADERS,
                rows=(("Role", "ServiceAccount"),),
                label="RELATIONSHIP:",
                title="Kind of edge and sub type binding",
            )
        ]

    def test_plural_label(self) -> None:
        response = make_response(
            model_names=["m"],
            relationships=[
                relationship("m", from_kind="Role"),
                relationship("m", from_kind="ClusterRole"),
            ],
        )

        tables = [b for b in ReportEngine().build(response) if isinstance(b, TableBlock)]

        assert len(tables) == 1
        assert tables[0].label == "RELATIONSHIPS:"
        assert tables[0].rows == (("Role", "ServiceAccount"), ("ClusterRole", "ServiceAccount"))

    def test_groups_in_first_seen_order(self) -> None:
        records = [
            RelationshipRecord.from_raw(relationship("m", kind="hierarchical", subtype="parent")),
            RelationshipRecord.from_raw(relationship("m", kind="edge", subtype="network")),
            RelationshipRecord.from_raw(
                relationship("m", kind="hierarchical", subtype="parent", from_kind="Namespace")
            ),
        ]

        groups = group_relationships(records, "m")

        assert [(g.kind, g.subtype) for g in groups] == [
            ("hierarchical", "parent"),
            ("edge", "network"),
        ]
        assert len(groups[0].rows) == 2

    def test_tuple_keys_do_not_collide(self) -> None:
        """Kinds that concatenate to the same string stay distinct."""
        records = [
            RelationshipRecord.from_raw(
                relationship("m", kind="a-b", subtype="c", from_kind="X", to_kind="Y")
            ),
            RelationshipRecord.from_raw(
                relationship("m", kind="a", subtype="b-c", from_kind="X", to_kind="Y")
            ),
        ]

        groups = group_relationships(records, "m")

        assert len(groups) == 2

    def test_other_models_filtered(self) -> None:
        records = [RelationshipRecord.from_raw(relationship("other"))]

        assert group_relationships(records, "m") == []


class TestUnsuccessfulEntities:
    """Tests for failed entity reporting."""

    def test_counting_with_unknown(self) -> None:
        """Unknown entries report immediately; others are summarized."""
        entity = UnsuccessfulEntity.from_raw(
            failure(["m1", "m1", "m1"], ["component", "relationship", "Unknown"], "boom")
        )

        blocks = unsuccessful_entity_blocks(entity, "m1")

        assert blocks == [
            ErrorBlock("Import process for file m1 encountered error:", "boom", indent=False),
            ErrorBlock(
                "Import did not occur for 1 entity of type component and "
                "1 entity of type relationship error:",
                "boom",
            ),
        ]

    def test_name_filter(self) -> None:
        entity = UnsuccessfulEntity.from_raw(
            failure(["m1", "m2", "m1"], ["component", "component", "component"], "x")
        )

        blocks = unsuccessful_entity_blocks(entity, "m1")

        assert blocks == [
            ErrorBlock("Import did not occur for 2 entities of type component error:", "x")
        ]

    def test_empty_model_counts_only_unknown(self) -> None:
        """Without a model name only Unknown entries are considered."""
        entity = UnsuccessfulEntity.from_raw(
            failure(["a.yaml", "m1"], ["Unknown", "component"], "unreadable")
        )

        blocks = unsuccessful_entity_blocks(entity, "")

        assert blocks == [
            ErrorBlock(
                "Import process for file a.yaml encountered error:", "unreadable", indent=False
            )
        ]

    def test_no_matches(self) -> None:
        entity = UnsuccessfulEntity.from_raw(failure(["m2"], ["component"], "x"))

        assert unsuccessful_entity_blocks(entity, "m1") == []

    @pytest.mark.parametrize(
        ("components", "relationships", "expected"),
        [
            (0, 0, ""),
            (1, 0, " 1 entity of type component"),
            (3, 0, " 3 entities of type component"),
            (0, 1, " 1 entity of type relationship"),
            (2, 5, " 2 entities of type component and 5 entities of type relationship"),
        ],
    )
    def test_entity_type_phrase(self, components: int, relationships: int, expected: str) -> None:
        assert entity_type_phrase(components, relationships) == expected


class TestMalformedRecords:
    """Tests for skip-and-log handling of bad records."""

    def test_missing_error_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        """A failure record without error is skipped with one diagnostic."""
        response = make_response(
            model_names=["m"],
            components=[component("Pod", "m")],
            relationships=[relationship("m")],
            failures=[
                {"name": ["m"], "entityType": ["component"]},
                failure(["m"], ["relationship"], "bad", "selector"),
            ],
        )

        with caplog.at_level(logging.WARNING, logger="meshimport.report.engine"):
            blocks = ReportEngine().build(response)

        warnings = [r for r in caplog.records if r.levelno >= logging.WARNING]
        assert len(warnings) == 1
        assert warnings[0].record_kind == "unsuccessful entity"  # type: ignore[attr-defined]

        assert TableBlock(COMPONENT_HEADERS, (("Pod", "Orchestration", "v1"),)) in blocks
        assert any(isinstance(b, TableBlock) and b.headers == RELATIONSHIP_HEADERS for b in blocks)
        assert ErrorBlock(
            "Import did not occur for 1 entity of type relationship error:", "bad selector"
        ) in blocks

    def test_malformed_relationship_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        """A relationship with no selectors does not stop the report."""
        response = make_response(
            model_names=["m"],
            relationships=[
                {"Kind": "edge", "Subtype": "binding", "Model": {"name": "m"}},
                relationship("m", kind="hierarchical", subtype="parent"),
            ],
        )

        with caplog.at_level(logging.WARNING, logger="meshimport.report.engine"):
            blocks = ReportEngine().build(response)

        tables = [b for b in blocks if isinstance(b, TableBlock)]
        assert [t.title for t in tables] == ["Kind of hierarchical and sub type parent"]
        assert "Skipping malformed record" in caplog.text

    def test_non_object_component_skipped(self) -> None:
        response = make_response(
            model_names=["m"],
            components=["garbage", component("Pod", "m")],
        )

        blocks = ReportEngine().build(response)

        assert TableBlock(COMPONENT_HEADERS, (("Pod", "Orchestration", "v1"),)) in blocks


class TestModelNamesSummary:
    """Tests for the unique model name list."""

    def test_unique_in_order(self) -> None:
        response = make_response(model_names=["b", "a", "", "b", "c"])

        assert model_names_summary(response) == "b, a, c"

    def test_empty(self) -> None:
        assert model_names_summary(make_response(model_names=[])) == ""
