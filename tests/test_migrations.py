"""Tests for legacy graph-* label and interface pattern migrations."""

import logging

from conftest import topology_from_yaml

from clab_graph.models.annotations import NodeAnnotation, TopologyAnnotations
from clab_graph.services.migration.graph_label_migrator import GraphLabelMigrator
from clab_graph.services.migration.interface_pattern_resolver import (
    InterfacePatternResolver,
)

LABELLED_TOPOLOGY = """
name: demo
topology:
  nodes:
    srl1:
      kind: nokia_srlinux
      labels:
        graph-posX: "120"
        graph-posY: "bad"
        graph-icon: router
        graph-group: dc1
        graph-level: 2
        graph-geoCoordinateLat: "48.1"
        graph-geoCoordinateLng: "11.5"
    srl2:
      kind: nokia_srlinux
      labels:
        graph-posX: "10"
    srl3:
      kind: nokia_srlinux
      labels:
        graph-icon: leaf
    plain:
      kind: linux
"""


class TestGraphLabelMigrator:
    """Detection, parsing and non-destructive apply."""

    def test_detect(self):
        migrations = GraphLabelMigrator(topology_from_yaml(LABELLED_TOPOLOGY)).detect(None)
        by_id = {m.node_id: m for m in migrations}

        assert list(by_id) == ["srl1", "srl2", "srl3"]
        assert by_id["srl1"].to_dict() == {
            "nodeId": "srl1",
            "position": {"x": 120.0, "y": 0.0},
            "icon": "router",
            "group": "dc1",
            "level": "2",
            "geoCoordinates": {"lat": 48.1, "lng": 11.5},
        }
        assert by_id["srl2"].to_dict() == {"nodeId": "srl2"}

    def test_annotated_nodes_skipped(self):
        annotations = TopologyAnnotations([NodeAnnotation(id="srl1")])
        migrations = GraphLabelMigrator(topology_from_yaml(LABELLED_TOPOLOGY)).detect(
            annotations
        )
        assert [m.node_id for m in migrations] == ["srl2", "srl3"]

    def test_apply_returns_copy(self):
        original = TopologyAnnotations([NodeAnnotation(id="other")])
        migrator = GraphLabelMigrator(topology_from_yaml(LABELLED_TOPOLOGY))
        merged = migrator.apply(original, migrator.detect(original))

        assert len(original.node_annotations) == 1
        assert [a.id for a in merged.node_annotations] == ["other", "srl1", "srl2", "srl3"]
        assert merged.node_annotations[3].icon == "leaf"


class TestInterfacePatternResolver:
    """Annotation pattern first, kind default second."""

    def test_kind_default_needs_migration(self):
        resolver = InterfacePatternResolver()
        assert resolver.resolve_for_node("srl1", "nokia_srlinux", None) == "e1-{n}"
        assert [m.to_dict() for m in resolver.migrations] == [
            {"nodeId": "srl1", "interfacePattern": "e1-{n}"}
        ]

    def test_annotation_wins(self):
        resolver = InterfacePatternResolver()
        annotation = NodeAnnotation(id="srl1", interface_pattern="eth{n}")
        assert resolver.resolve_for_node("srl1", "nokia_srlinux", annotation) == "eth{n}"
        assert resolver.migrations == []

    def test_unknown_kind(self):
        resolver = InterfacePatternResolver()
        assert resolver.resolve_for_node("x", "custom", None) is None
        assert resolver.migrations == []

    def test_custom_defaults(self):
        resolver = InterfacePatternResolver({"custom": "p{n}"})
        assert resolver.resolve("custom", None).needs_migration

    def test_logs_through_injected_logger(self, caplog, test_logger):
        resolver = InterfacePatternResolver(log=test_logger)
        with caplog.at_level(logging.DEBUG, logger=test_logger.name):
            resolver.resolve_for_node("srl1", "nokia_srlinux", None)

        assert [r.name for r in caplog.records] == [test_logger.name]
        assert "srl1" in caplog.records[0].getMessage()
