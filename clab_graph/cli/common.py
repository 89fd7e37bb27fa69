# clab_graph/cli/common.py

"""Minimal shared utilities to eliminate CLI duplication"""

from clab_graph.clients.containerlab.inspect_client import InspectDataProvider
from clab_graph.models.container import ContainerDataProvider
from clab_graph.utils.exceptions import ContainerDataError


def create_container_provider(**kwargs) -> ContainerDataProvider | None:
    """Create a container data provider from common parameters, or None for editor mode"""
    inspect_data = kwargs.get("inspect_data")
    interface_data = kwargs.get("interface_data")
    live = kwargs.get("live", False)

    if live and inspect_data:
        raise ContainerDataError("--live cannot be combined with --inspect-data")
    if interface_data and not inspect_data and not live:
        raise ContainerDataError("--interface-data requires --inspect-data")

    if live:
        return InspectDataProvider.from_containerlab(
            topology_path=str(kwargs["topology"]) if kwargs.get("topology") else None
        )
    if inspect_data:
        return InspectDataProvider.from_files(
            str(inspect_data), str(interface_data) if interface_data else None
        )
    return None
