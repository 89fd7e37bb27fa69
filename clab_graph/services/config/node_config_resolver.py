# clab_graph/services/config/node_config_resolver.py

import copy
import logging

from clab_graph.models.topology import Topology
from clab_graph.utils.helpers import is_record

logger = logging.getLogger(__name__)


def _fragment(section: dict, name) -> dict:
    if not isinstance(name, str):
        return {}
    value = section.get(name)
    return value if is_record(value) else {}


def resolve_kind(topology: Topology, node_config: dict) -> str | None:
    """
    Resolve a node's kind through ``node > group > defaults``.

    The kind table itself is never consulted here; it is keyed by the
    result of this lookup.
    """
    group_cfg = _fragment(topology.groups, node_config.get("group"))
    for source in (node_config, group_cfg, topology.defaults):
        kind = source.get("kind")
        if isinstance(kind, str) and kind:
            return kind
    return None


def resolve_node_config(topology: Topology, node_config: dict | None) -> dict:
    """
    Merge a node's configuration through the inheritance chain.

    Scalar fields take precedence ``node > group > kind > defaults``;
    ``labels`` are merged key-wise across all four levels with the node
    level winning.

    Parameters
    ----------
    topology : Topology
        The topology whose ``kinds``, ``groups`` and ``defaults`` apply.
    node_config : dict or None
        The node's declared configuration.

    Returns
    -------
    dict
        A new merged configuration; neither the node nor the document is
        modified.
    """
    node_config = node_config if is_record(node_config) else {}
    defaults = topology.defaults
    group_cfg = _fragment(topology.groups, node_config.get("group"))
    kind = resolve_kind(topology, node_config)
    kind_cfg = _fragment(topology.kinds, kind)

    merged = {}
    for layer in (defaults, kind_cfg, group_cfg, node_config):
        merged.update(copy.deepcopy(layer))

    if kind is not None:
        merged["kind"] = kind
    else:
        merged.pop("kind", None)

    labels = {}
    for layer in (defaults, kind_cfg, group_cfg, node_config):
        layer_labels = layer.get("labels")
        if is_record(layer_labels):
            labels.update(copy.deepcopy(layer_labels))
    merged["labels"] = labels
    return merged


def inherited_properties(node_config: dict | None, merged: dict) -> list[str]:
    """Names of merged keys that the node itself did not declare."""
    declared = set(node_config.keys()) if is_record(node_config) else set()
    return [key for key in merged if key not in declared]
