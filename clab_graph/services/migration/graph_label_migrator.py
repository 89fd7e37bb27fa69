# clab_graph/services/migration/graph_label_migrator.py

import logging

from clab_graph.models.annotations import GeoCoordinates, Position, TopologyAnnotations
from clab_graph.models.migrations import GraphLabelMigration
from clab_graph.models.topology import Topology
from clab_graph.utils.constants import (
    GRAPH_LABEL_GEO_LAT,
    GRAPH_LABEL_GEO_LNG,
    GRAPH_LABEL_GROUP,
    GRAPH_LABEL_GROUP_LABEL_POS,
    GRAPH_LABEL_ICON,
    GRAPH_LABEL_KEYS,
    GRAPH_LABEL_LEVEL,
    GRAPH_LABEL_POS_X,
    GRAPH_LABEL_POS_Y,
)
from clab_graph.utils.helpers import is_record, parse_float, to_str

logger = logging.getLogger(__name__)


def has_graph_labels(labels) -> bool:
    if not is_record(labels):
        return False
    return any(labels.get(key) for key in GRAPH_LABEL_KEYS)


class GraphLabelMigrator:
    """
    Detects legacy ``graph-*`` node labels that belong in the annotation file.

    Only nodes without a node annotation are considered; once a node has
    an annotation, its labels are no longer the source of its placement.
    The topology is never modified.

    Parameters
    ----------
    topology : Topology
        The topology to scan.
    log : logging.Logger, optional
        Logger for detection messages.
    """

    def __init__(self, topology: Topology, log: logging.Logger | None = None):
        self.topology = topology
        self.log = log or logger

    def detect(self, annotations: TopologyAnnotations | None) -> list[GraphLabelMigration]:
        """
        Return one migration per node carrying ``graph-*`` labels.

        Parameters
        ----------
        annotations : TopologyAnnotations or None
            Existing annotations; annotated nodes are skipped.

        Returns
        -------
        list[GraphLabelMigration]
            Migrations in node document order.
        """
        annotated = annotations.node_annotation_ids() if annotations else set()
        migrations = []
        for name in self.topology.nodes:
            if name in annotated:
                continue
            labels = self.topology.node_config(name).get("labels")
            migration = self.build_migration(name, labels)
            if migration is not None:
                self.log.info(f"Detected graph-* labels for node {name} that need migration")
                migrations.append(migration)
        return migrations

    @staticmethod
    def build_migration(node_id: str, labels) -> GraphLabelMigration | None:
        if not has_graph_labels(labels):
            return None
        migration = GraphLabelMigration(node_id=node_id)
        if labels.get(GRAPH_LABEL_POS_X) and labels.get(GRAPH_LABEL_POS_Y):
            migration.position = Position(
                x=parse_float(labels[GRAPH_LABEL_POS_X]),
                y=parse_float(labels[GRAPH_LABEL_POS_Y]),
            )
        if labels.get(GRAPH_LABEL_ICON):
            migration.icon = to_str(labels[GRAPH_LABEL_ICON])
        if labels.get(GRAPH_LABEL_GROUP):
            migration.group = to_str(labels[GRAPH_LABEL_GROUP])
        if labels.get(GRAPH_LABEL_LEVEL):
            migration.level = to_str(labels[GRAPH_LABEL_LEVEL])
        if labels.get(GRAPH_LABEL_GROUP_LABEL_POS):
            migration.group_label_pos = to_str(labels[GRAPH_LABEL_GROUP_LABEL_POS])
        if labels.get(GRAPH_LABEL_GEO_LAT) and labels.get(GRAPH_LABEL_GEO_LNG):
            migration.geo_coordinates = GeoCoordinates(
                lat=parse_float(labels[GRAPH_LABEL_GEO_LAT]),
                lng=parse_float(labels[GRAPH_LABEL_GEO_LNG]),
            )
        return migration

    @staticmethod
    def apply(
        annotations: TopologyAnnotations | None, migrations: list[GraphLabelMigration]
    ) -> TopologyAnnotations:
        """Return a copy of ``annotations`` with one node annotation per migration appended."""
        result = annotations.copy() if annotations is not None else TopologyAnnotations()
        for migration in migrations:
            result.node_annotations.append(migration.to_node_annotation())
        return result
