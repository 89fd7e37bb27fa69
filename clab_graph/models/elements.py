# clab_graph/models/elements.py

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar

from clab_graph.models.annotations import Position
from clab_graph.utils.constants import BRIDGE_KINDS, CLASS_ALIASED_BASE_BRIDGE


class ElementGroup(str, Enum):
    NODES = "nodes"
    EDGES = "edges"


class NodeRole(str, Enum):
    """Built-in display roles; annotations may also supply a free-form icon name."""

    ROUTER = "router"
    CLIENT = "client"
    BRIDGE = "bridge"
    CLOUD = "cloud"
    DEFAULT = "default"


class NodeVisibility(str, Enum):
    VISIBLE = "visible"
    ALIASED_BASE_BRIDGE = CLASS_ALIASED_BASE_BRIDGE


@dataclass
class NodeExtraData:
    """
    Structured per-node payload.

    Fields the compiler relies on are typed attributes; every other key of
    the resolved YAML config (and, for network nodes, the extended link
    properties) is kept in ``passthrough`` so nothing the user wrote is lost.
    """

    id: str
    name: str
    kind: str = ""
    type: str = ""
    image: str = ""
    group: str = ""
    level: str = ""
    index: str = ""
    fqdn: str = ""
    labdir: str = ""
    longname: str = ""
    shortname: str = ""
    labels: dict[str, Any] = field(default_factory=dict)
    state: str = ""
    mgmt_ipv4_address: str = ""
    mgmt_ipv6_address: str = ""
    mac_address: str = ""
    interface_pattern: str | None = None
    inherited: list[str] = field(default_factory=list)
    yaml_node_id: str | None = None
    passthrough: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        out = dict(self.passthrough)
        out.update(
            {
                "id": self.id,
                "name": self.name,
                "shortname": self.shortname,
                "longname": self.longname,
                "kind": self.kind,
                "type": self.type,
                "image": self.image,
                "group": self.group,
                "level": self.level,
                "index": self.index,
                "fqdn": self.fqdn,
                "labdir": self.labdir,
                "labels": dict(self.labels),
                "state": self.state,
                "mgmtIpv4Address": self.mgmt_ipv4_address,
                "mgmtIpv6Address": self.mgmt_ipv6_address,
                "macAddress": self.mac_address,
                "inherited": list(self.inherited),
            }
        )
        if self.interface_pattern:
            out["interfacePattern"] = self.interface_pattern
        if self.yaml_node_id:
            out["extYamlNodeId"] = self.yaml_node_id
        return out


@dataclass
class NodeElement:
    """A graph node: a declared topology node, a network endpoint or an alias."""

    group: ClassVar[ElementGroup] = ElementGroup.NODES

    id: str
    name: str
    role: str
    extra_data: NodeExtraData
    position: Position = field(default_factory=Position)
    lat: str = ""
    lng: str = ""
    icon_color: str | None = None
    icon_corner_radius: float | None = None
    classes: list[str] = field(default_factory=list)
    visibility: NodeVisibility = NodeVisibility.VISIBLE

    @property
    def kind(self) -> str:
        return self.extra_data.kind

    def is_bridge(self) -> bool:
        return self.kind in BRIDGE_KINDS

    def is_hidden(self) -> bool:
        return self.visibility is not NodeVisibility.VISIBLE

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "topoViewerRole": self.role,
            "lat": self.lat,
            "lng": self.lng,
            "visibility": self.visibility.value,
            "extraData": self.extra_data.to_dict(),
        }
        if self.icon_color is not None:
            data["iconColor"] = self.icon_color
        if self.icon_corner_radius is not None:
            data["iconCornerRadius"] = self.icon_corner_radius
        classes = list(self.classes)
        if self.is_hidden() and self.visibility.value not in classes:
            classes.append(self.visibility.value)
        return {
            "group": self.group.value,
            "data": data,
            "position": self.position.to_dict(),
            "classes": " ".join(classes),
        }


@dataclass
class EndpointRuntime:
    """Backing container and runtime interface data for one edge endpoint."""

    long_name: str = ""
    port: str = ""
    mac: str = ""
    state: str = ""
    mtu: int | str = ""
    type: str = ""
    netem: dict[str, Any] = field(default_factory=dict)
    stats: dict[str, float] | None = None


@dataclass
class EdgeExtraData:
    """
    Structured per-edge payload.

    ``ext`` holds the extended-link properties copied from YAML (type,
    mtu, vars, labels, vxlan/macvlan fields, endpoint MACs and IPs) under
    their ``ext*`` names.
    """

    source: EndpointRuntime = field(default_factory=EndpointRuntime)
    target: EndpointRuntime = field(default_factory=EndpointRuntime)
    yaml_format: str = "short"
    validation_errors: list[str] = field(default_factory=list)
    yaml_source_node_id: str = ""
    yaml_target_node_id: str = ""
    ext: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        out = {}
        for side, runtime in (("Source", self.source), ("Target", self.target)):
            out[f"clab{side}LongName"] = runtime.long_name
            out[f"clab{side}Port"] = runtime.port
            out[f"clab{side}MacAddress"] = runtime.mac
            out[f"clab{side}InterfaceState"] = runtime.state
            out[f"clab{side}Mtu"] = runtime.mtu
            out[f"clab{side}Type"] = runtime.type
            out[f"clab{side}Netem"] = dict(runtime.netem)
            if runtime.stats:
                out[f"clab{side}Stats"] = dict(runtime.stats)
        out.update(self.ext)
        out["yamlFormat"] = self.yaml_format
        if self.validation_errors:
            out["extValidationErrors"] = list(self.validation_errors)
        out["yamlSourceNodeId"] = self.yaml_source_node_id
        out["yamlTargetNodeId"] = self.yaml_target_node_id
        return out


@dataclass
class EdgeElement:
    """A graph edge built from one normalized link."""

    group: ClassVar[ElementGroup] = ElementGroup.EDGES

    id: str
    source: str
    target: str
    source_endpoint: str = ""
    target_endpoint: str = ""
    classes: list[str] = field(default_factory=list)
    extra_data: EdgeExtraData = field(default_factory=EdgeExtraData)

    def references(self, node_id: str) -> bool:
        return node_id in (self.source, self.target)

    def to_dict(self) -> dict:
        return {
            "group": self.group.value,
            "data": {
                "id": self.id,
                "name": self.id,
                "topoViewerRole": "link",
                "source": self.source,
                "target": self.target,
                "sourceEndpoint": self.source_endpoint,
                "targetEndpoint": self.target_endpoint,
                "extraData": self.extra_data.to_dict(),
            },
            "position": {"x": 0, "y": 0},
            "classes": " ".join(c for c in self.classes if c),
        }
