# clab_graph/services/aliases/alias_node_handler.py

"""
Alias nodes: extra visual instances of one YAML bridge.

A node annotation with ``yamlNodeId`` and ``yamlInterface`` set declares
that the edge attached to ``<yamlNodeId>:<yamlInterface>`` should be drawn
against the annotation's own node instead. Once every edge of a bridge has
moved to an alias, the base bridge is hidden.
"""

import logging
from dataclasses import dataclass

from clab_graph.models.annotations import Position, TopologyAnnotations
from clab_graph.models.elements import (
    EdgeElement,
    NodeElement,
    NodeExtraData,
    NodeRole,
    NodeVisibility,
)
from clab_graph.models.topology import Topology
from clab_graph.services.config.node_config_resolver import resolve_node_config
from clab_graph.services.nodes.node_element_builder import build_annotation_lookup
from clab_graph.utils.constants import BRIDGE_KINDS, KIND_BRIDGE, SPECIAL_NODE_INDEX
from clab_graph.utils.helpers import as_trimmed_string

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AliasEntry:
    yaml_node_id: str
    interface: str
    alias_node_id: str

    @property
    def key(self) -> str:
        return alias_key(self.yaml_node_id, self.interface)


def alias_key(node_id: str, endpoint: str) -> str:
    return f"{node_id}|{endpoint}"


def collect_alias_entries(
    annotations: TopologyAnnotations | None, log: logging.Logger | None = None
) -> list[AliasEntry]:
    """
    Read alias entries from node annotations in file order.

    Entries whose ``yamlNodeId`` is itself another entry's alias id are
    chains and are rejected.
    """
    log = log or logger
    if annotations is None:
        return []
    entries = []
    for ann in annotations.node_annotations:
        alias_id = as_trimmed_string(ann.id)
        yaml_id = as_trimmed_string(ann.yaml_node_id)
        iface = as_trimmed_string(ann.yaml_interface)
        if not alias_id or not yaml_id or not iface or alias_id == yaml_id:
            continue
        entries.append(AliasEntry(yaml_id, iface, alias_id))

    alias_ids = {entry.alias_node_id for entry in entries}
    accepted = []
    for entry in entries:
        if entry.yaml_node_id in alias_ids:
            log.debug(
                f"Ignoring alias '{entry.alias_node_id}': '{entry.yaml_node_id}' "
                f"is itself an alias"
            )
            continue
        accepted.append(entry)
    return accepted


class AliasNodeHandler:
    """
    Adds alias nodes, rewires their edges and hides fully-aliased bridges.

    One handler serves one compile run.

    Parameters
    ----------
    topology : Topology
        The topology being compiled.
    annotations : TopologyAnnotations or None
        Source of alias entries and placement.
    log : logging.Logger, optional
        Logger for diagnostics.
    """

    def __init__(
        self,
        topology: Topology,
        annotations: TopologyAnnotations | None,
        log: logging.Logger | None = None,
    ):
        self.topology = topology
        self.annotations = annotations
        self.log = log or logger
        self.entries = collect_alias_entries(annotations, self.log)
        self.annotation_lookup = build_annotation_lookup(annotations)
        self.materialized: dict[str, NodeElement] = {}
        self._logged_unmapped: set[str] = set()

    def _bridge_kind(self, node_id: str) -> str | None:
        if node_id not in self.topology.nodes:
            return None
        merged = resolve_node_config(self.topology, self.topology.node_config(node_id))
        kind = merged.get("kind")
        return kind if kind in BRIDGE_KINDS else None

    def _placement(self, alias_id: str, yaml_id: str) -> Position:
        for ann_id in (alias_id, yaml_id):
            ann = self.annotation_lookup.get(ann_id)
            if ann is not None and ann.position is not None:
                return Position(ann.position.x, ann.position.y)
        return Position()

    def build_alias_element(self, entry: AliasEntry, kind: str) -> NodeElement:
        alias_ann = self.annotation_lookup.get(entry.alias_node_id)
        label = as_trimmed_string(alias_ann.label) if alias_ann is not None else ""
        display = label or entry.alias_node_id
        extra = NodeExtraData(
            id=entry.alias_node_id,
            name=display,
            shortname=display,
            longname=display,
            kind=kind or KIND_BRIDGE,
            type=kind or KIND_BRIDGE,
            index=SPECIAL_NODE_INDEX,
            yaml_node_id=entry.yaml_node_id,
        )
        return NodeElement(
            id=entry.alias_node_id,
            name=display,
            role=NodeRole.BRIDGE.value,
            extra_data=extra,
            position=self._placement(entry.alias_node_id, entry.yaml_node_id),
        )

    def materialize(self) -> list[NodeElement]:
        """Create one node per distinct alias id whose base is a bridge."""
        created = []
        for entry in self.entries:
            if entry.alias_node_id in self.materialized:
                continue
            kind = self._bridge_kind(entry.yaml_node_id)
            if kind is None:
                self.log.debug(
                    f"Alias '{entry.alias_node_id}' refers to '{entry.yaml_node_id}', "
                    f"which is not a bridge node"
                )
                continue
            element = self.build_alias_element(entry, kind)
            self.materialized[entry.alias_node_id] = element
            created.append(element)
        return created

    def alias_mapping(self) -> dict[str, str]:
        """``"<yamlNodeId>|<interface>"`` to alias id, for materialized aliases only."""
        return {
            entry.key: entry.alias_node_id
            for entry in self.entries
            if entry.alias_node_id in self.materialized
        }

    def rewire(self, edges: list[EdgeElement]) -> int:
        """Point matching edge endpoints at their alias nodes; returns the number rewired."""
        mapping = self.alias_mapping()
        if not mapping:
            return 0
        rewired = 0
        for edge in edges:
            source_alias = mapping.get(alias_key(edge.source, edge.source_endpoint))
            target_alias = mapping.get(alias_key(edge.target, edge.target_endpoint))
            if source_alias:
                edge.extra_data.yaml_source_node_id = edge.source
                edge.source = source_alias
            if target_alias:
                edge.extra_data.yaml_target_node_id = edge.target
                edge.target = target_alias
            if source_alias or target_alias:
                rewired += 1
        return rewired

    def hide_base_bridges(self, nodes: list[NodeElement], edges: list[EdgeElement]):
        """
        Hide each aliased base bridge that no edge references directly.

        A base bridge that still has a direct edge stays visible and the
        gap is logged once per bridge.
        """
        bases = {
            element.extra_data.yaml_node_id
            for element in self.materialized.values()
            if element.extra_data.yaml_node_id
        }
        if not bases:
            return
        still_referenced = {
            node_id for node_id in bases if any(e.references(node_id) for e in edges)
        }
        for node in nodes:
            if node.id not in bases:
                continue
            if node.id in still_referenced:
                if node.id not in self._logged_unmapped:
                    self.log.info(
                        f"Base bridge '{node.id}' has unmapped links; "
                        f"keeping node visible until mapped."
                    )
                    self._logged_unmapped.add(node.id)
                continue
            if node.is_bridge():
                node.visibility = NodeVisibility.ALIASED_BASE_BRIDGE
