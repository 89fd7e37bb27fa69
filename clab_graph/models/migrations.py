# clab_graph/models/migrations.py

from dataclasses import dataclass

from clab_graph.models.annotations import GeoCoordinates, NodeAnnotation, Position


@dataclass
class InterfacePatternMigration:
    """A kind-default interface pattern that should be saved to annotations."""

    node_id: str
    interface_pattern: str

    def to_dict(self) -> dict:
        return {"nodeId": self.node_id, "interfacePattern": self.interface_pattern}


@dataclass
class GraphLabelMigration:
    """Legacy ``graph-*`` node labels that should move into annotations."""

    node_id: str
    position: Position | None = None
    icon: str | None = None
    group: str | None = None
    level: str | None = None
    group_label_pos: str | None = None
    geo_coordinates: GeoCoordinates | None = None

    def to_node_annotation(self) -> NodeAnnotation:
        return NodeAnnotation(
            id=self.node_id,
            position=self.position,
            icon=self.icon or None,
            group=self.group or None,
            level=self.level or None,
            group_label_pos=self.group_label_pos or None,
            geo_coordinates=self.geo_coordinates,
        )

    def to_dict(self) -> dict:
        out = {"nodeId": self.node_id}
        if self.position is not None:
            out["position"] = self.position.to_dict()
        if self.icon:
            out["icon"] = self.icon
        if self.group:
            out["group"] = self.group
        if self.level:
            out["level"] = self.level
        if self.group_label_pos:
            out["groupLabelPos"] = self.group_label_pos
        if self.geo_coordinates is not None:
            out["geoCoordinates"] = self.geo_coordinates.to_dict()
        return out
