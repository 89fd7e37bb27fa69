# clab_graph/services/special/special_node_collector.py

import logging
from dataclasses import dataclass

from clab_graph.models.annotations import (
    NetworkNodeAnnotation,
    Position,
    TopologyAnnotations,
)
from clab_graph.models.elements import NodeElement, NodeExtraData, NodeRole
from clab_graph.models.link import NormalizedLink, split_endpoint
from clab_graph.models.topology import Topology
from clab_graph.utils.constants import (
    BRIDGE_KINDS,
    CLASS_SPECIAL_ENDPOINT,
    HOST_INTERFACE_TYPES,
    KIND_BRIDGE,
    LINK_TYPE_DUMMY,
    LINK_TYPE_HOST,
    LINK_TYPE_MACVLAN,
    LINK_TYPE_MGMT_NET,
    LINK_TYPE_VETH,
    LINK_TYPE_VXLAN,
    LINK_TYPE_VXLAN_STITCH,
    PREFIX_DUMMY,
    PREFIX_MACVLAN,
    PREFIX_VXLAN,
    PREFIX_VXLAN_STITCH,
    SPECIAL_NODE_INDEX,
)
from clab_graph.utils.helpers import is_record, to_str

logger = logging.getLogger(__name__)


@dataclass
class SpecialNodeInfo:
    """A network endpoint that becomes a ``cloud`` node in the graph."""

    id: str
    type: str
    label: str


def determine_special_node(node: str, iface: str) -> SpecialNodeInfo | None:
    """Classify an endpoint node name; ``None`` for ordinary nodes."""
    if node in (LINK_TYPE_HOST, LINK_TYPE_MGMT_NET):
        return SpecialNodeInfo(f"{node}:{iface}", node, f"{node}:{iface or node}")
    if node.startswith(PREFIX_MACVLAN):
        return SpecialNodeInfo(node, LINK_TYPE_MACVLAN, node)
    if node.startswith(PREFIX_VXLAN_STITCH):
        return SpecialNodeInfo(node, LINK_TYPE_VXLAN_STITCH, node)
    if node.startswith(PREFIX_VXLAN):
        return SpecialNodeInfo(node, LINK_TYPE_VXLAN, node)
    if node.startswith(PREFIX_DUMMY):
        return SpecialNodeInfo(node, LINK_TYPE_DUMMY, node)
    return None


def special_id_for_endpoint(endpoint) -> str | None:
    parts = split_endpoint(endpoint)
    info = determine_special_node(parts.node, parts.iface)
    return info.id if info else None


def build_base_props(link: dict, link_type: str) -> dict:
    """
    Extended link properties shown on the special node of a single-endpoint link.

    Scalar values the editor treats as text (mtu, vxlan fields) are
    converted to strings.
    """
    props = {"extType": link_type}
    if link.get("mtu") is not None:
        props["extMtu"] = to_str(link["mtu"])
    if "vars" in link:
        props["extVars"] = link["vars"]
    if "labels" in link:
        props["extLabels"] = link["labels"]
    if link_type in HOST_INTERFACE_TYPES:
        if "host-interface" in link:
            props["extHostInterface"] = link["host-interface"]
        if link_type == LINK_TYPE_MACVLAN and "mode" in link:
            props["extMode"] = link["mode"]
    if link_type in (LINK_TYPE_VXLAN, LINK_TYPE_VXLAN_STITCH):
        for key, prop in (
            ("remote", "extRemote"),
            ("vni", "extVni"),
            ("dst-port", "extDstPort"),
            ("src-port", "extSrcPort"),
        ):
            if link.get(key) is not None:
                props[prop] = to_str(link[key])
    endpoint = link.get("endpoint")
    if is_record(endpoint) and "mac" in endpoint:
        props["extMac"] = endpoint["mac"]
    return props


class SpecialNodeCollector:
    """
    Finds every network endpoint referenced by the links of a topology.

    Declared ``bridge``/``ovs-bridge`` nodes seed the map, then each
    normalized link registers both of its endpoints in link order. The
    first sighting of an id fixes its type and label.

    Parameters
    ----------
    topology : Topology
        The topology being compiled.
    log : logging.Logger, optional
        Logger for diagnostics.
    """

    def __init__(self, topology: Topology, log: logging.Logger | None = None):
        self.topology = topology
        self.log = log or logger
        self.declared_ids = topology.node_ids()
        self.special_nodes: dict[str, SpecialNodeInfo] = {}
        self.special_props: dict[str, dict] = {}

    def collect(self, links: list[NormalizedLink]) -> dict[str, SpecialNodeInfo]:
        self._seed_declared_bridges()
        for link in links:
            self._register(link.end_a)
            self._register(link.end_b)
            self._merge_props(link)
        self.log.debug(f"Collected {len(self.special_nodes)} special node(s)")
        return self.special_nodes

    def _seed_declared_bridges(self):
        for name in self.topology.nodes:
            kind = self.topology.node_config(name).get("kind")
            if kind in BRIDGE_KINDS:
                self.special_nodes[name] = SpecialNodeInfo(name, kind, name)

    def _register(self, endpoint):
        parts = split_endpoint(endpoint)
        info = determine_special_node(parts.node, parts.iface)
        if info is None and not parts.iface and parts.node:
            if parts.node in self.declared_ids:
                return
            # A bare endpoint naming an undeclared node is an implicit bridge
            info = SpecialNodeInfo(parts.node, KIND_BRIDGE, parts.node)
        if info is not None and info.id not in self.special_nodes:
            self.special_nodes[info.id] = info

    def _merge_props(self, link: NormalizedLink):
        if not link.link_type or link.link_type == LINK_TYPE_VETH:
            return
        base = build_base_props(link.link, link.link_type)
        for endpoint in (link.end_a, link.end_b):
            special_id = special_id_for_endpoint(endpoint)
            if special_id:
                self.special_props.setdefault(special_id, {}).update(base)

    def is_special(self, node_id: str) -> bool:
        if node_id in self.special_nodes:
            return True
        return special_id_for_endpoint(node_id) is not None


def _placement_annotation(
    node_id: str, annotations: TopologyAnnotations | None
) -> NetworkNodeAnnotation | None:
    if annotations is None:
        return None
    return annotations.find_network_annotation(
        node_id
    ) or annotations.find_cloud_annotation(node_id)


def build_special_node_element(
    info: SpecialNodeInfo, props: dict, placement: NetworkNodeAnnotation | None
) -> NodeElement:
    """Create the ``cloud`` node element for one special endpoint."""
    display = (placement.label if placement else None) or info.label or info.id
    position = placement.position if placement and placement.position else None
    geo = placement.geo_coordinates if placement else None
    extra = NodeExtraData(
        id=info.id,
        name=display,
        shortname=display,
        longname=info.id,
        kind=info.type,
        type=info.type,
        group=(placement.group if placement else None) or "",
        level=(placement.level if placement else None) or "",
        index=SPECIAL_NODE_INDEX,
        passthrough=dict(props),
    )
    return NodeElement(
        id=info.id,
        name=display,
        role=NodeRole.CLOUD.value,
        extra_data=extra,
        position=Position(position.x, position.y) if position else Position(),
        lat=str(geo.lat) if geo else "",
        lng=str(geo.lng) if geo else "",
        classes=[CLASS_SPECIAL_ENDPOINT],
    )


def materialize_special_nodes(
    collector: SpecialNodeCollector,
    annotations: TopologyAnnotations | None,
    existing_ids: set,
) -> list[NodeElement]:
    """
    Emit one element per special endpoint not already declared as a node.

    Network-node annotations with no matching link are materialized too, so
    a network node survives the deletion of its last link.

    Parameters
    ----------
    collector : SpecialNodeCollector
        A collector whose ``collect`` has run.
    annotations : TopologyAnnotations or None
        Source of placement data.
    existing_ids : set
        Ids already present in the element list.

    Returns
    -------
    list[NodeElement]
        New elements in link-scan order, then orphaned annotations in file order.
    """
    elements = []
    emitted = set(existing_ids)
    for node_id, info in collector.special_nodes.items():
        if node_id in collector.declared_ids or node_id in emitted:
            continue
        placement = _placement_annotation(node_id, annotations)
        props = collector.special_props.get(node_id, {})
        elements.append(build_special_node_element(info, props, placement))
        emitted.add(node_id)

    if annotations is None:
        return elements

    for ann in annotations.network_node_annotations:
        if ann.id in emitted or ann.id in collector.special_nodes:
            continue
        if ann.id in collector.declared_ids:
            continue
        info = SpecialNodeInfo(ann.id, ann.type, ann.label or ann.id)
        props = collector.special_props.get(ann.id, {})
        elements.append(build_special_node_element(info, props, ann))
        emitted.add(ann.id)
        collector.log.debug(f"Materialized orphaned network node '{ann.id}'")
    return elements
