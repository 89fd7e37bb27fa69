# clab_graph/services/edges/edge_element_builder.py

import logging
import math

from clab_graph.models.container import (
    ContainerDataProvider,
    InterfaceInfo,
    InterfaceMatch,
)
from clab_graph.models.elements import EdgeElement, EdgeExtraData, EndpointRuntime
from clab_graph.models.link import NormalizedLink
from clab_graph.models.topology import Topology
from clab_graph.services.config.node_config_resolver import resolve_node_config
from clab_graph.services.distributed.sros_mapper import (
    find_distributed_interface,
    is_distributed_node,
    node_components,
)
from clab_graph.services.edges.link_validator import validate_extended_link
from clab_graph.services.links.link_normalizer import (
    build_container_name,
    extract_endpoint_mac,
    resolve_actual_node,
    should_omit_endpoint,
)
from clab_graph.services.special.special_node_collector import SpecialNodeCollector
from clab_graph.utils.constants import (
    CLASS_LINK_DOWN,
    CLASS_LINK_UP,
    CLASS_STUB_LINK,
    EDGE_ID_PREFIX,
    STATS_KEYS,
)
from clab_graph.utils.helpers import is_record

logger = logging.getLogger(__name__)

# YAML key -> extended property name, with the default used when absent
EXT_LINK_PROPS = (
    ("type", "extType", ""),
    ("mtu", "extMtu", ""),
    ("host-interface", "extHostInterface", ""),
    ("mode", "extMode", ""),
    ("remote", "extRemote", ""),
    ("vni", "extVni", ""),
    ("dst-port", "extDstPort", ""),
    ("src-port", "extSrcPort", ""),
)


def class_from_state(state: str | None) -> str:
    if not state:
        return ""
    return CLASS_LINK_UP if state == "up" else CLASS_LINK_DOWN


def compute_edge_class(
    source_special: bool,
    target_special: bool,
    source_state: str | None,
    target_state: str | None,
) -> str:
    """
    Visual state class of an edge.

    A special endpoint has no state of its own, so an edge touching one
    takes the state of the other side; an edge between two special
    endpoints is always up. Otherwise both sides must be known.
    """
    if source_special and target_special:
        return CLASS_LINK_UP
    if source_special:
        return class_from_state(target_state)
    if target_special:
        return class_from_state(source_state)
    if source_state and target_state:
        both_up = source_state == "up" and target_state == "up"
        return CLASS_LINK_UP if both_up else CLASS_LINK_DOWN
    return ""


def extract_interface_stats(iface: InterfaceInfo | None) -> dict | None:
    """Finite numeric traffic counters of an interface, or ``None`` when there are none."""
    if iface is None or not is_record(iface.stats):
        return None
    stats = {}
    for key in STATS_KEYS:
        value = iface.stats.get(key)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        if math.isfinite(value):
            stats[key] = value
    return stats or None


def endpoint_runtime(
    container_name: str, iface_name: str, iface: InterfaceInfo | None
) -> EndpointRuntime:
    if iface is None:
        return EndpointRuntime(long_name=container_name, port=iface_name)
    return EndpointRuntime(
        long_name=container_name,
        port=iface_name,
        mac=iface.mac,
        state=iface.state,
        mtu=iface.mtu if iface.mtu is not None else "",
        type=iface.type,
        netem=iface.netem.to_dict() if iface.netem else {},
        stats=extract_interface_stats(iface),
    )


def _ip_string(value) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def _endpoint_ip(endpoint, key: str) -> str:
    if not is_record(endpoint):
        return ""
    return _ip_string(endpoint.get(key))


def _indexed_ip(link: dict, key: str, index: int) -> str:
    values = link.get(key)
    if not isinstance(values, list) or index >= len(values):
        return ""
    return _ip_string(values[index])


def extract_ext_props(link: NormalizedLink) -> dict:
    """
    Extended link properties carried on the edge.

    Endpoint IPs come from extended endpoint objects, falling back to the
    ordered ``ipv4``/``ipv6`` lists of the short format.
    """
    raw = link.link
    props = {prop: raw.get(key, default) for key, prop, default in EXT_LINK_PROPS}
    if "vars" in raw:
        props["extVars"] = raw["vars"]
    if "labels" in raw:
        props["extLabels"] = raw["labels"]

    endpoint = raw.get("endpoint")
    props["extSourceMac"] = extract_endpoint_mac(link.end_a)
    props["extTargetMac"] = extract_endpoint_mac(link.end_b)
    props["extMac"] = endpoint.get("mac", "") if is_record(endpoint) else ""

    for side, end, index in (("Source", link.end_a, 0), ("Target", link.end_b, 1)):
        for key, suffix in (("ipv4", "Ipv4"), ("ipv6", "Ipv6")):
            props[f"ext{side}{suffix}"] = _endpoint_ip(end, key) or _indexed_ip(
                raw, key, index
            )
    return props


class EdgeElementBuilder:
    """
    Builds one graph edge per normalized link.

    Parameters
    ----------
    topology : Topology
        The topology being compiled.
    full_prefix : str
        Container name prefix.
    lab_name : str
        Lab name for container lookups.
    special : SpecialNodeCollector
        Collector that has already scanned the links.
    provider : ContainerDataProvider or None
        Source of runtime data; without one no state class is computed.
    log : logging.Logger, optional
        Logger for diagnostics.
    """

    def __init__(
        self,
        topology: Topology,
        full_prefix: str,
        lab_name: str,
        special: SpecialNodeCollector,
        provider: ContainerDataProvider | None = None,
        log: logging.Logger | None = None,
    ):
        self.topology = topology
        self.full_prefix = full_prefix
        self.lab_name = lab_name
        self.special = special
        self.provider = provider
        self.log = log or logger

    def build_all(self, links: list[NormalizedLink]) -> list[EdgeElement]:
        """Build edges; ids count only the links that survived normalization."""
        return [self.build(link, index) for index, link in enumerate(links)]

    def resolve_endpoint(
        self, node: str, actual_node: str, iface_name: str
    ) -> InterfaceMatch:
        """Find the container and interface backing one endpoint."""
        container_name = build_container_name(node, actual_node, self.full_prefix)
        if self.provider is None:
            return InterfaceMatch(container_name)

        iface = self.provider.find_interface(container_name, iface_name, self.lab_name)
        if iface is not None:
            return InterfaceMatch(container_name, iface)

        self.log.debug(
            f"Interface not found: {container_name}:{iface_name} in lab {self.lab_name}"
        )
        if node not in self.topology.nodes:
            return InterfaceMatch(container_name)

        merged = resolve_node_config(self.topology, self.topology.node_config(node))
        if is_distributed_node(merged):
            match = find_distributed_interface(
                base_node_name=node,
                iface_name=iface_name,
                full_prefix=self.full_prefix,
                lab_name=self.lab_name,
                provider=self.provider,
                components=node_components(merged),
            )
            if match is not None:
                return match
        return InterfaceMatch(container_name)

    def build(self, link: NormalizedLink, index: int) -> EdgeElement:
        source, target = link.source, link.target
        actual_source = resolve_actual_node(source.node, source.iface)
        actual_target = resolve_actual_node(target.node, target.iface)
        source_match = self.resolve_endpoint(source.node, actual_source, source.iface)
        target_match = self.resolve_endpoint(target.node, actual_target, target.iface)

        classes = []
        if self.provider is not None:
            classes.append(
                compute_edge_class(
                    self.special.is_special(source.node),
                    self.special.is_special(target.node),
                    source_match.interface.state if source_match.interface else None,
                    target_match.interface.state if target_match.interface else None,
                )
            )
        special_ids = self.special.special_nodes
        if actual_source in special_ids or actual_target in special_ids:
            classes.append(CLASS_STUB_LINK)

        errors = validate_extended_link(link.link)
        if errors:
            self.log.debug(f"Link #{link.index} failed validation: {', '.join(errors)}")

        extra = EdgeExtraData(
            source=endpoint_runtime(
                source_match.container_name, source.iface, source_match.interface
            ),
            target=endpoint_runtime(
                target_match.container_name, target.iface, target_match.interface
            ),
            yaml_format="extended" if link.is_extended else "short",
            validation_errors=errors,
            yaml_source_node_id=source.node,
            yaml_target_node_id=target.node,
            ext=extract_ext_props(link),
        )
        return EdgeElement(
            id=f"{EDGE_ID_PREFIX}{index}",
            source=actual_source,
            target=actual_target,
            source_endpoint="" if should_omit_endpoint(source.node) else source.iface,
            target_endpoint="" if should_omit_endpoint(target.node) else target.iface,
            classes=[c for c in classes if c],
            extra_data=extra,
        )
