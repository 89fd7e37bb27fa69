# clab_graph/services/nodes/node_element_builder.py

import logging

from clab_graph.models.annotations import NodeAnnotation, Position, TopologyAnnotations
from clab_graph.models.container import ContainerDataProvider, ContainerInfo
from clab_graph.models.elements import NodeElement, NodeExtraData, NodeRole
from clab_graph.models.topology import Topology
from clab_graph.services.config.node_config_resolver import (
    inherited_properties,
    resolve_node_config,
)
from clab_graph.services.distributed.sros_mapper import (
    find_distributed_container,
    is_distributed_node,
    node_components,
)
from clab_graph.services.migration.interface_pattern_resolver import (
    InterfacePatternResolver,
)
from clab_graph.utils.constants import (
    BRIDGE_KINDS,
    CLIENT_KINDS,
    ROLE_LABEL,
    ROUTER_KINDS,
)
from clab_graph.utils.helpers import as_trimmed_string, strip_graph_labels

logger = logging.getLogger(__name__)

# Keys of the resolved config that map onto typed NodeExtraData fields
TYPED_CONFIG_KEYS = ("kind", "type", "image", "group", "labels")


def detect_role(kind: str | None) -> str:
    if not kind:
        return NodeRole.DEFAULT.value
    normalized = kind.lower()
    if normalized in ROUTER_KINDS:
        return NodeRole.ROUTER.value
    if normalized in CLIENT_KINDS:
        return NodeRole.CLIENT.value
    return NodeRole.DEFAULT.value


def resolve_role(merged: dict, annotation: NodeAnnotation | None) -> str:
    """Annotation icon, then the ``topoViewer-role`` label, then the kind."""
    if annotation is not None and annotation.icon:
        return annotation.icon
    label_role = merged.get("labels", {}).get(ROLE_LABEL)
    if isinstance(label_role, str) and label_role:
        return label_role
    if merged.get("kind") in BRIDGE_KINDS:
        return NodeRole.BRIDGE.value
    return detect_role(merged.get("kind"))


def resolve_display_name(
    node_name: str, annotation: NodeAnnotation | None, is_bridge: bool
) -> str:
    label = as_trimmed_string(annotation.label) if annotation is not None else ""
    return label if is_bridge and label else node_name


def compute_longname(container_name: str | None, full_prefix: str, node_name: str) -> str:
    if container_name:
        return container_name
    return f"{full_prefix}-{node_name}" if full_prefix else node_name


def build_annotation_lookup(
    annotations: TopologyAnnotations | None,
) -> dict[str, NodeAnnotation]:
    """
    Index node annotations by id.

    Bridges used to be saved as network-node annotations; their positions
    are still honoured when no node annotation exists.
    """
    if annotations is None:
        return {}
    lookup = annotations.node_annotation_index()
    for ann in annotations.network_node_annotations:
        if ann.id not in lookup:
            lookup[ann.id] = NodeAnnotation(id=ann.id, position=ann.position)
    return lookup


class NodeElementBuilder:
    """
    Builds one graph node per declared topology node.

    Parameters
    ----------
    topology : Topology
        The topology being compiled.
    full_prefix : str
        Container name prefix (``clab-<lab>``, or ``""``).
    lab_name : str
        Lab name used for container lookups and FQDNs.
    annotations : TopologyAnnotations or None
        Annotations (with graph-label migrations already merged in).
    provider : ContainerDataProvider or None
        Source of runtime data; ``None`` disables enrichment.
    pattern_resolver : InterfacePatternResolver, optional
        Collects interface-pattern migrations.
    log : logging.Logger, optional
        Logger for diagnostics.
    """

    def __init__(
        self,
        topology: Topology,
        full_prefix: str,
        lab_name: str,
        annotations: TopologyAnnotations | None = None,
        provider: ContainerDataProvider | None = None,
        pattern_resolver: InterfacePatternResolver | None = None,
        log: logging.Logger | None = None,
    ):
        self.topology = topology
        self.full_prefix = full_prefix
        self.lab_name = lab_name
        self.annotations = annotations
        self.provider = provider
        self.log = log or logger
        self.pattern_resolver = pattern_resolver or InterfacePatternResolver(log=self.log)
        self.annotation_lookup = build_annotation_lookup(annotations)

    @property
    def migrations(self):
        return self.pattern_resolver.migrations

    def build_all(self) -> list[NodeElement]:
        """Build node elements in document order."""
        elements = []
        for node_name in self.topology.nodes:
            node_config = self.topology.node_config(node_name)
            merged = resolve_node_config(self.topology, node_config)
            annotation = self.annotation_lookup.get(node_name)
            if self._is_alias_target(node_name, annotation, merged):
                self.log.debug(
                    f"Skipping bridge '{node_name}': annotation maps it to "
                    f"'{annotation.yaml_node_id}'"
                )
                continue
            elements.append(
                self.build(node_name, node_config, merged, annotation, len(elements))
            )
        return elements

    @staticmethod
    def _is_alias_target(
        node_name: str, annotation: NodeAnnotation | None, merged: dict
    ) -> bool:
        if annotation is None or not annotation.yaml_node_id:
            return False
        return annotation.yaml_node_id != node_name and merged.get("kind") in BRIDGE_KINDS

    def container_for(self, node_name: str, merged: dict) -> ContainerInfo | None:
        """Direct container lookup, then the distributed component search."""
        if self.provider is None:
            return None
        container_name = f"{self.full_prefix}-{node_name}" if self.full_prefix else node_name
        container = self.provider.find_container(container_name, self.lab_name)
        if container is not None:
            return container
        if not is_distributed_node(merged):
            self.log.debug(f"No container found for node '{node_name}'")
            return None
        return find_distributed_container(
            base_node_name=node_name,
            full_prefix=self.full_prefix,
            lab_name=self.lab_name,
            provider=self.provider,
            components=node_components(merged),
        )

    def build(
        self,
        node_name: str,
        node_config: dict,
        merged: dict,
        annotation: NodeAnnotation | None,
        index: int,
    ) -> NodeElement:
        kind = merged.get("kind") or ""
        container = self.container_for(node_name, merged)
        pattern = self.pattern_resolver.resolve_for_node(node_name, kind, annotation)
        is_bridge = kind in BRIDGE_KINDS

        extra = NodeExtraData(
            id=node_name,
            name=node_name,
            shortname=node_name,
            longname=compute_longname(
                container.name if container else None, self.full_prefix, node_name
            ),
            kind=kind,
            type=str(merged.get("type") or ""),
            image=str(merged.get("image") or ""),
            group=str(merged.get("group") or ""),
            index=str(index),
            fqdn=f"{node_name}.{self.lab_name}.io",
            labdir=f"{self.full_prefix}/" if self.full_prefix else "",
            labels=strip_graph_labels(merged.get("labels")),
            state=container.state if container else "",
            mgmt_ipv4_address=container.ipv4_address if container else "",
            mgmt_ipv6_address=container.ipv6_address if container else "",
            interface_pattern=pattern or None,
            inherited=inherited_properties(node_config, merged),
            passthrough={k: v for k, v in merged.items() if k not in TYPED_CONFIG_KEYS},
        )

        position = Position()
        lat = lng = ""
        icon_color = icon_corner_radius = None
        if annotation is not None:
            if annotation.position is not None:
                position = Position(annotation.position.x, annotation.position.y)
            if annotation.geo_coordinates is not None:
                lat = str(annotation.geo_coordinates.lat)
                lng = str(annotation.geo_coordinates.lng)
            icon_color = annotation.icon_color
            icon_corner_radius = annotation.icon_corner_radius

        return NodeElement(
            id=node_name,
            name=resolve_display_name(node_name, annotation, is_bridge),
            role=resolve_role(merged, annotation),
            extra_data=extra,
            position=position,
            lat=lat,
            lng=lng,
            icon_color=icon_color,
            icon_corner_radius=icon_corner_radius,
        )
