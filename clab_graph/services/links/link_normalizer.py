# clab_graph/services/links/link_normalizer.py

import logging

from clab_graph.models.link import NormalizedLink, is_endpoint_input
from clab_graph.models.topology import Topology
from clab_graph.utils.constants import (
    HOST_INTERFACE_TYPES,
    LINK_TYPE_DUMMY,
    LINK_TYPE_HOST,
    LINK_TYPE_MGMT_NET,
    LINK_TYPE_VXLAN,
    LINK_TYPE_VXLAN_STITCH,
    PREFIX_DUMMY,
    PREFIX_MACVLAN,
    PREFIX_VXLAN,
    PREFIX_VXLAN_STITCH,
    SINGLE_ENDPOINT_TYPES,
)
from clab_graph.utils.helpers import is_record

logger = logging.getLogger(__name__)

COUNTER_ID_FORMATS = {
    LINK_TYPE_VXLAN: "vxlan:vxlan{n}",
    LINK_TYPE_VXLAN_STITCH: "vxlan-stitch:vxlan{n}",
    LINK_TYPE_DUMMY: "dummy{n}",
}

SPECIAL_NODE_PREFIXES = (PREFIX_MACVLAN, PREFIX_VXLAN_STITCH, PREFIX_VXLAN, PREFIX_DUMMY)


class CompileContext:
    """
    Per-compile allocator for counter-based special node ids.

    One context must be used for exactly one compile run. Ids are cached by
    the link's position in the document, so asking twice for the same link
    returns the same id and never advances the counter again.
    """

    def __init__(self):
        self.counters = {link_type: 0 for link_type in COUNTER_ID_FORMATS}
        self._allocated: dict[tuple[str, int], str] = {}

    def __repr__(self):
        return f"CompileContext(counters={self.counters})"

    def allocate(self, link_type: str, link_index: int) -> str:
        """
        Return the synthetic id for a vxlan, vxlan-stitch or dummy link.

        Parameters
        ----------
        link_type : str
            One of ``vxlan``, ``vxlan-stitch``, ``dummy``.
        link_index : int
            Position of the link in the document's ``links`` list.

        Returns
        -------
        str
            The cached id, or a freshly allocated one.
        """
        key = (link_type, link_index)
        cached = self._allocated.get(key)
        if cached:
            return cached
        special_id = COUNTER_ID_FORMATS[link_type].format(n=self.counters[link_type])
        self.counters[link_type] += 1
        self._allocated[key] = special_id
        return special_id


def special_id_for_link(
    link_type: str, link: dict, link_index: int, ctx: CompileContext
) -> str:
    """Synthesize the implicit far-side node id of a single-endpoint link."""
    if link_type in HOST_INTERFACE_TYPES:
        host_interface = link.get("host-interface")
        return f"{link_type}:{'' if host_interface is None else host_interface}"
    if link_type in COUNTER_ID_FORMATS:
        return ctx.allocate(link_type, link_index)
    return ""


def _endpoint_pair(link: dict):
    endpoints = link.get("endpoints")
    if not isinstance(endpoints, list) or len(endpoints) < 2:
        return None
    end_a, end_b = endpoints[0], endpoints[1]
    if end_a is None or end_b is None:
        return None
    return end_a, end_b


def normalize_link(
    link, link_index: int, ctx: CompileContext, log: logging.Logger | None = None
) -> NormalizedLink | None:
    """
    Reduce one raw link to two endpoints.

    Parameters
    ----------
    link : dict
        The raw link mapping from ``topology.links``.
    link_index : int
        Position of the link in the document.
    ctx : CompileContext
        Allocator for counter-based special ids.
    log : logging.Logger, optional
        Logger for skip diagnostics.

    Returns
    -------
    NormalizedLink or None
        ``None`` when required endpoint data is missing or not in a
        recognized format. A rejected link never allocates a special id.
    """
    log = log or logger
    if not is_record(link):
        log.warning(f"Link #{link_index} is not a mapping. Skipping.")
        return None

    link_type = link.get("type") if isinstance(link.get("type"), str) else ""

    if link_type in SINGLE_ENDPOINT_TYPES:
        endpoint = link.get("endpoint")
        if endpoint is None:
            log.warning(f"Link #{link_index} ({link_type}) has no endpoint. Skipping.")
            return None
        if not is_endpoint_input(endpoint):
            log.warning(
                f"Link #{link_index} endpoint is not in a recognized format. Skipping."
            )
            return None
        special = special_id_for_link(link_type, link, link_index, ctx)
        return NormalizedLink(link_index, link, endpoint, special, link_type)

    pair = _endpoint_pair(link)
    if pair is None:
        log.warning(f"Link #{link_index} does not have both endpoints. Skipping.")
        return None
    if not is_endpoint_input(pair[0]) or not is_endpoint_input(pair[1]):
        log.warning(
            f"Link #{link_index} endpoints are not in a recognized format. Skipping."
        )
        return None
    return NormalizedLink(link_index, link, pair[0], pair[1], link_type)


def normalize_links(
    topology: Topology, ctx: CompileContext, log: logging.Logger | None = None
) -> list[NormalizedLink]:
    """Normalize every link in document order, dropping the malformed ones."""
    normalized = []
    for index, link in enumerate(topology.links):
        result = normalize_link(link, index, ctx, log)
        if result is not None:
            normalized.append(result)
    return normalized


def is_special_endpoint_name(node: str) -> bool:
    """True for endpoint node names that denote a network endpoint, not a container."""
    return node in (LINK_TYPE_HOST, LINK_TYPE_MGMT_NET) or node.startswith(
        SPECIAL_NODE_PREFIXES
    )


def resolve_actual_node(node: str, iface: str) -> str:
    """Map an endpoint to its graph node id (``host`` + ``eth1`` -> ``host:eth1``)."""
    if node in (LINK_TYPE_HOST, LINK_TYPE_MGMT_NET):
        return f"{node}:{iface}"
    return node


def build_container_name(node: str, actual_node: str, full_prefix: str) -> str:
    if is_special_endpoint_name(node):
        return actual_node
    return f"{full_prefix}-{node}" if full_prefix else node


def should_omit_endpoint(node: str) -> bool:
    """Host-side endpoints carry no interface on the edge."""
    return node in (LINK_TYPE_HOST, LINK_TYPE_MGMT_NET) or node.startswith(
        (PREFIX_MACVLAN, PREFIX_DUMMY)
    )


def extract_endpoint_mac(endpoint) -> str:
    if not is_record(endpoint):
        return ""
    mac = endpoint.get("mac")
    return mac if isinstance(mac, str) else ""
