# clab_graph/models/link.py

import logging
from dataclasses import dataclass

from clab_graph.utils.constants import (
    LINK_TYPE_VETH,
    PREFIX_DUMMY,
    PREFIX_MACVLAN,
    PREFIX_VXLAN,
    PREFIX_VXLAN_STITCH,
)
from clab_graph.utils.helpers import is_record

logger = logging.getLogger(__name__)

ENDPOINT_PARTS = 2

# Endpoint strings that are already special ids and carry no interface
NODE_ONLY_PREFIXES = (PREFIX_MACVLAN, PREFIX_DUMMY, PREFIX_VXLAN, PREFIX_VXLAN_STITCH)


@dataclass(frozen=True)
class EndpointParts:
    """An endpoint split into its node name and (possibly empty) interface."""

    node: str
    iface: str = ""

    def __str__(self):
        return f"{self.node}:{self.iface}" if self.iface else self.node


def is_endpoint_object(value) -> bool:
    """True for ``{node: str, interface?: str}`` mappings."""
    if not is_record(value) or not isinstance(value.get("node"), str):
        return False
    iface = value.get("interface")
    return iface is None or isinstance(iface, str)


def is_endpoint_input(value) -> bool:
    return isinstance(value, str) or is_endpoint_object(value)


def split_endpoint(endpoint) -> EndpointParts:
    """
    Split an endpoint into node and interface.

    Parameters
    ----------
    endpoint : str or dict
        Either ``"node:iface"`` or ``{"node": ..., "interface": ...}``.

    Returns
    -------
    EndpointParts
        Node and interface. Strings with no colon, more than one colon, or
        that are themselves special ids (``macvlan:*``, ``vxlan:*``, ...)
        are node-only.
    """
    if isinstance(endpoint, str):
        if endpoint.startswith(NODE_ONLY_PREFIXES):
            return EndpointParts(endpoint)
        parts = endpoint.split(":")
        if len(parts) == ENDPOINT_PARTS:
            return EndpointParts(parts[0], parts[1])
        return EndpointParts(endpoint)
    if is_record(endpoint):
        node = endpoint.get("node")
        iface = endpoint.get("interface")
        return EndpointParts(
            node if isinstance(node, str) else "",
            iface if isinstance(iface, str) else "",
        )
    return EndpointParts("")


@dataclass
class NormalizedLink:
    """
    A link reduced to two endpoints.

    Parameters
    ----------
    index : int
        Position of the link in the document's ``links`` list.
    link : dict
        The raw link mapping (never modified).
    end_a : str or dict
        The first endpoint as written in the document.
    end_b : str or dict
        The second endpoint; a synthesized special id for single-endpoint types.
    link_type : str
        The declared ``type``, or ``""`` for the short (implicit veth) form.
    """

    index: int
    link: dict
    end_a: object
    end_b: object
    link_type: str = ""

    def __repr__(self):
        return f"NormalizedLink(#{self.index} {self.source} <-> {self.target})"

    @property
    def source(self) -> EndpointParts:
        return split_endpoint(self.end_a)

    @property
    def target(self) -> EndpointParts:
        return split_endpoint(self.end_b)

    @property
    def is_extended(self) -> bool:
        return bool(self.link_type)

    @property
    def is_veth(self) -> bool:
        return self.link_type in ("", LINK_TYPE_VETH)
