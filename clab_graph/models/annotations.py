# clab_graph/models/annotations.py

import copy
import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any

from clab_graph.utils.exceptions import AnnotationsFileError
from clab_graph.utils.helpers import is_record

logger = logging.getLogger(__name__)

NODE_ANNOTATIONS = "nodeAnnotations"
NETWORK_NODE_ANNOTATIONS = "networkNodeAnnotations"
CLOUD_NODE_ANNOTATIONS = "cloudNodeAnnotations"


@dataclass
class Position:
    """Canvas coordinates of a node."""

    x: float = 0
    y: float = 0

    @classmethod
    def from_dict(cls, data) -> "Position | None":
        if not is_record(data):
            return None
        x, y = data.get("x"), data.get("y")
        if not _is_number(x) or not _is_number(y):
            return None
        return cls(x=x, y=y)

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}


@dataclass
class GeoCoordinates:
    lat: float
    lng: float

    @classmethod
    def from_dict(cls, data) -> "GeoCoordinates | None":
        if not is_record(data):
            return None
        lat, lng = data.get("lat"), data.get("lng")
        if not _is_number(lat) or not _is_number(lng):
            return None
        return cls(lat=lat, lng=lng)

    def to_dict(self) -> dict:
        return {"lat": self.lat, "lng": self.lng}


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _opt_str(value) -> str | None:
    return value if isinstance(value, str) else None


@dataclass
class NodeAnnotation:
    """
    Visual settings for one node, keyed by node id.

    An annotation whose ``yaml_node_id`` and ``yaml_interface`` are set
    describes an alias: an extra visual instance of a bridge node.
    """

    id: str
    label: str | None = None
    yaml_node_id: str | None = None
    yaml_interface: str | None = None
    position: Position | None = None
    geo_coordinates: GeoCoordinates | None = None
    icon: str | None = None
    icon_color: str | None = None
    icon_corner_radius: float | None = None
    group: str | None = None
    level: str | None = None
    group_label_pos: str | None = None
    interface_pattern: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    _KNOWN_KEYS = (
        "id",
        "label",
        "yamlNodeId",
        "yamlInterface",
        "position",
        "geoCoordinates",
        "icon",
        "iconColor",
        "iconCornerRadius",
        "group",
        "level",
        "groupLabelPos",
        "interfacePattern",
    )

    @classmethod
    def from_dict(cls, data: dict) -> "NodeAnnotation | None":
        if not is_record(data) or not isinstance(data.get("id"), str):
            return None
        radius = data.get("iconCornerRadius")
        return cls(
            id=data["id"],
            label=_opt_str(data.get("label")),
            yaml_node_id=_opt_str(data.get("yamlNodeId")),
            yaml_interface=_opt_str(data.get("yamlInterface")),
            position=Position.from_dict(data.get("position")),
            geo_coordinates=GeoCoordinates.from_dict(data.get("geoCoordinates")),
            icon=_opt_str(data.get("icon")),
            icon_color=_opt_str(data.get("iconColor")),
            icon_corner_radius=radius if _is_number(radius) else None,
            group=_opt_str(data.get("group")),
            level=_opt_str(data.get("level")),
            group_label_pos=_opt_str(data.get("groupLabelPos")),
            interface_pattern=_opt_str(data.get("interfacePattern")),
            extra={k: v for k, v in data.items() if k not in cls._KNOWN_KEYS},
        )

    def to_dict(self) -> dict:
        out = dict(self.extra)
        out["id"] = self.id
        optional = {
            "label": self.label,
            "yamlNodeId": self.yaml_node_id,
            "yamlInterface": self.yaml_interface,
            "position": self.position.to_dict() if self.position else None,
            "geoCoordinates": (
                self.geo_coordinates.to_dict() if self.geo_coordinates else None
            ),
            "icon": self.icon,
            "iconColor": self.icon_color,
            "iconCornerRadius": self.icon_corner_radius,
            "group": self.group,
            "level": self.level,
            "groupLabelPos": self.group_label_pos,
            "interfacePattern": self.interface_pattern,
        }
        out.update({k: v for k, v in optional.items() if v is not None})
        return out


@dataclass
class NetworkNodeAnnotation:
    """Placement of a host/mgmt-net/macvlan/vxlan/dummy/bridge network node."""

    id: str
    type: str
    label: str | None = None
    position: Position | None = None
    geo_coordinates: GeoCoordinates | None = None
    group: str | None = None
    level: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "NetworkNodeAnnotation | None":
        if not is_record(data) or not isinstance(data.get("id"), str):
            return None
        return cls(
            id=data["id"],
            type=data.get("type") if isinstance(data.get("type"), str) else "",
            label=_opt_str(data.get("label")),
            position=Position.from_dict(data.get("position")),
            geo_coordinates=GeoCoordinates.from_dict(data.get("geoCoordinates")),
            group=_opt_str(data.get("group")),
            level=_opt_str(data.get("level")),
        )

    def to_dict(self) -> dict:
        out = {"id": self.id, "type": self.type}
        if self.label is not None:
            out["label"] = self.label
        out["position"] = (self.position or Position()).to_dict()
        if self.geo_coordinates:
            out["geoCoordinates"] = self.geo_coordinates.to_dict()
        if self.group is not None:
            out["group"] = self.group
        if self.level is not None:
            out["level"] = self.level
        return out


class TopologyAnnotations:
    """
    The annotation sidecar consumed by the compiler.

    Only node, network-node and legacy cloud-node annotations are modelled;
    every other annotation class (free text, shapes, groups, viewer
    settings, ...) is carried through untouched in ``other``.

    Parameters
    ----------
    node_annotations : list[NodeAnnotation]
        Per-node visual settings, in file order.
    network_node_annotations : list[NetworkNodeAnnotation]
        Placement of special network nodes.
    cloud_node_annotations : list[NetworkNodeAnnotation]
        Legacy placement records for special network nodes.
    other : dict
        Remaining sidecar keys.
    """

    def __init__(
        self,
        node_annotations=None,
        network_node_annotations=None,
        cloud_node_annotations=None,
        other=None,
    ):
        self.node_annotations: list[NodeAnnotation] = list(node_annotations or [])
        self.network_node_annotations: list[NetworkNodeAnnotation] = list(
            network_node_annotations or []
        )
        self.cloud_node_annotations: list[NetworkNodeAnnotation] = list(
            cloud_node_annotations or []
        )
        self.other: dict = dict(other or {})

    def __repr__(self):
        return (
            f"TopologyAnnotations(nodes={len(self.node_annotations)}, "
            f"networkNodes={len(self.network_node_annotations)})"
        )

    @classmethod
    def from_dict(cls, data) -> "TopologyAnnotations":
        """
        Build annotations from a decoded sidecar, skipping malformed entries.

        Parameters
        ----------
        data : dict or None
            The decoded JSON sidecar.

        Returns
        -------
        TopologyAnnotations
            The parsed annotations (empty when ``data`` is not a mapping).
        """
        if not is_record(data):
            return cls()

        def parse_list(key, parser):
            items = data.get(key)
            if not isinstance(items, list):
                return []
            parsed = []
            for item in items:
                entry = parser(item)
                if entry is None:
                    logger.debug(f"Skipping malformed entry in '{key}': {item!r}")
                    continue
                parsed.append(entry)
            return parsed

        known = (NODE_ANNOTATIONS, NETWORK_NODE_ANNOTATIONS, CLOUD_NODE_ANNOTATIONS)
        return cls(
            node_annotations=parse_list(NODE_ANNOTATIONS, NodeAnnotation.from_dict),
            network_node_annotations=parse_list(
                NETWORK_NODE_ANNOTATIONS, NetworkNodeAnnotation.from_dict
            ),
            cloud_node_annotations=parse_list(
                CLOUD_NODE_ANNOTATIONS, NetworkNodeAnnotation.from_dict
            ),
            other={k: copy.deepcopy(v) for k, v in data.items() if k not in known},
        )

    def to_dict(self) -> dict:
        out = copy.deepcopy(self.other)
        out[NODE_ANNOTATIONS] = [a.to_dict() for a in self.node_annotations]
        out[NETWORK_NODE_ANNOTATIONS] = [
            a.to_dict() for a in self.network_node_annotations
        ]
        if self.cloud_node_annotations:
            out[CLOUD_NODE_ANNOTATIONS] = [
                a.to_dict() for a in self.cloud_node_annotations
            ]
        return out

    def copy(self) -> "TopologyAnnotations":
        return copy.deepcopy(self)

    def node_annotation_index(self) -> dict[str, NodeAnnotation]:
        """Map node id to annotation; a later duplicate id wins."""
        return {a.id: a for a in self.node_annotations}

    def node_annotation_ids(self) -> set:
        return {a.id for a in self.node_annotations}

    def find_network_annotation(self, node_id) -> NetworkNodeAnnotation | None:
        for ann in self.network_node_annotations:
            if ann.id == node_id:
                return ann
        return None

    def find_cloud_annotation(self, node_id) -> NetworkNodeAnnotation | None:
        for ann in self.cloud_node_annotations:
            if ann.id == node_id:
                return ann
        return None


def load_annotations_file(path: str) -> TopologyAnnotations:
    """
    Load an annotation sidecar (``<topo>.annotations.json``).

    Parameters
    ----------
    path : str
        Path to the JSON sidecar.

    Returns
    -------
    TopologyAnnotations
        The parsed annotations.

    Raises
    ------
    AnnotationsFileError
        If the file does not exist or is not valid JSON.
    """
    logger.info(f"Loading annotations from '{path}'")
    if not os.path.isfile(path):
        logger.critical(f"Annotations file '{path}' does not exist!")
        raise AnnotationsFileError(f"Annotations file '{path}' does not exist!")

    try:
        with open(path) as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        logger.critical(f"File '{path}' is not valid JSON.")
        raise AnnotationsFileError(f"File '{path}' is not valid JSON.") from e
    except OSError as e:
        logger.critical(f"Failed to read annotations file '{path}': {e}")
        raise AnnotationsFileError(
            f"Failed to read annotations file '{path}': {e}"
        ) from e

    return TopologyAnnotations.from_dict(data)
