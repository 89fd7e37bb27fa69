# clab_graph/services/distributed/sros_mapper.py

"""
Resolution of distributed SR-SIM nodes.

A distributed node is one logical chassis backed by one container per
component slot (``clab-lab-sr1-a``, ``clab-lab-sr1-b``, ``clab-lab-sr1-1``...).
Interfaces written in chassis notation (``1/1/c2/1``) live in one of those
containers under a flat alias (``e1-1-c2-1``).
"""

import logging
import re

from clab_graph.models.container import (
    ContainerDataProvider,
    ContainerInfo,
    InterfaceInfo,
    InterfaceMatch,
)
from clab_graph.utils.constants import KIND_DISTRIBUTED_SROS
from clab_graph.utils.helpers import is_record

logger = logging.getLogger(__name__)

SROS_PORT_RE = re.compile(r"^(\d+)/(?:x(\d+)/)?(\d+)(?:/c(\d+))?/(\d+)$")


def is_distributed_node(resolved_config: dict | None) -> bool:
    """True for ``nokia_srsim`` nodes with a non-empty ``components`` list."""
    if not is_record(resolved_config):
        return False
    if resolved_config.get("kind") != KIND_DISTRIBUTED_SROS:
        return False
    components = resolved_config.get("components")
    return isinstance(components, list) and len(components) > 0


def node_components(resolved_config: dict) -> list:
    components = resolved_config.get("components")
    return components if isinstance(components, list) else []


def map_interface_name(iface_name: str) -> str | None:
    """
    Map chassis notation to the container interface alias.

    Examples: ``1/1/1`` -> ``e1-1-1``, ``1/x2/1/c3/1`` -> ``e1-x2-1-c3-1``.
    ``eth*`` names are already flat and returned unchanged.

    Returns
    -------
    str or None
        The mapped name, or ``None`` when the input matches neither form.
    """
    if not iface_name:
        return None
    trimmed = iface_name.strip()
    if not trimmed:
        return None
    if trimmed.startswith("eth"):
        return trimmed
    match = SROS_PORT_RE.match(trimmed)
    if not match:
        return None
    card, xiom, mda, connector, port = match.groups()
    parts = [f"e{card}"]
    if xiom:
        parts.append(f"x{xiom}")
    parts.append(mda)
    if connector:
        parts.append(f"c{connector}")
    parts.append(port)
    return "-".join(parts)


def candidate_interface_names(iface_name: str) -> list[str]:
    names = []
    if iface_name:
        names.append(iface_name)
    mapped = map_interface_name(iface_name)
    if mapped and mapped not in names:
        names.append(mapped)
    return names


def match_interface_in_container(
    container: ContainerInfo, iface_name: str
) -> InterfaceInfo | None:
    """Return the first interface whose name, alias or container label matches."""
    candidates = candidate_interface_names(iface_name)
    label = container.label or ""
    for iface in container.interfaces:
        if iface.name in candidates or iface.alias in candidates:
            return iface
        if label and label in candidates:
            return iface
    return None


def slot_priority(slot: str) -> tuple[int, str]:
    """Sort key for component slots: ``a`` first, then ``b``, then the rest alphabetically."""
    normalized = slot.lower()
    if normalized == "a":
        return (0, normalized)
    if normalized == "b":
        return (1, normalized)
    return (2, normalized)


def component_slots(components: list) -> list[str]:
    slots = []
    for component in components:
        if not is_record(component):
            continue
        slot = component.get("slot")
        if not isinstance(slot, str) or not slot.strip():
            continue
        suffix = slot.strip().lower()
        if suffix not in slots:
            slots.append(suffix)
    return sorted(slots, key=slot_priority)


def build_candidate_names(
    base_node_name: str, full_prefix: str, components: list
) -> list[str]:
    """
    Candidate container names for each component, in slot priority order.

    Each slot contributes ``<prefix>-<base>-<slot>`` followed by
    ``<base>-<slot>``.
    """
    names = []
    for suffix in component_slots(components):
        short = f"{base_node_name}-{suffix}"
        long = f"{full_prefix}-{short}" if full_prefix else short
        for name in (long, short):
            if name not in names:
                names.append(name)
    return names


def container_belongs_to_node(
    container: ContainerInfo, base_node_name: str, full_prefix: str
) -> bool:
    long_base = f"{full_prefix}-{base_node_name}" if full_prefix else base_node_name
    return (
        container.name.startswith(f"{long_base}-")
        or container.name_short.startswith(f"{base_node_name}-")
        or (bool(container.label) and container.label.startswith(f"{base_node_name}-"))
    )


def find_distributed_interface(
    *,
    base_node_name: str,
    iface_name: str,
    full_prefix: str,
    lab_name: str,
    provider: ContainerDataProvider | None,
    components: list,
) -> InterfaceMatch | None:
    """
    Locate an interface of a distributed node across its component containers.

    Providers that define ``find_distributed_interface`` answer directly;
    otherwise each candidate container is looked up in slot order and the
    first one holding a matching interface wins.

    Returns
    -------
    InterfaceMatch or None
        The backing container name and interface, or ``None``.
    """
    if provider is None or not isinstance(components, list) or not components:
        return None

    hook = getattr(provider, "find_distributed_interface", None)
    if callable(hook):
        return hook(
            base_node_name=base_node_name,
            iface_name=iface_name,
            full_prefix=full_prefix,
            lab_name=lab_name,
            components=components,
        )

    for candidate in build_candidate_names(base_node_name, full_prefix, components):
        container = provider.find_container(candidate, lab_name)
        if container is None:
            continue
        iface = match_interface_in_container(container, iface_name)
        if iface is not None:
            logger.debug(
                f"Resolved {base_node_name}:{iface_name} to {container.name}:{iface.name}"
            )
            return InterfaceMatch(container_name=container.name, interface=iface)
    return None


def find_distributed_container(
    *,
    base_node_name: str,
    full_prefix: str,
    lab_name: str,
    provider: ContainerDataProvider | None,
    components: list,
) -> ContainerInfo | None:
    """Return the first existing component container in slot order."""
    if provider is None:
        return None

    hook = getattr(provider, "find_distributed_container", None)
    if callable(hook):
        return hook(
            base_node_name=base_node_name,
            full_prefix=full_prefix,
            lab_name=lab_name,
            components=components,
        )

    for candidate in build_candidate_names(base_node_name, full_prefix, components):
        container = provider.find_container(candidate, lab_name)
        if container is not None:
            return container
    return None
