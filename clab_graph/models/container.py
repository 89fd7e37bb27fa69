# clab_graph/models/container.py

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass
class NetemState:
    """Link impairments configured on an interface."""

    delay: str | None = None
    jitter: str | None = None
    loss: str | None = None
    rate: str | None = None
    corruption: str | None = None

    def to_dict(self) -> dict:
        return {k: v for k, v in self.__dict__.items() if v is not None}


@dataclass
class InterfaceInfo:
    """Runtime data for one container interface."""

    name: str
    alias: str = ""
    mac: str = ""
    mtu: int | None = None
    state: str = ""
    type: str = ""
    ifindex: int | None = None
    stats: dict[str, Any] | None = None
    netem: NetemState | None = None


@dataclass
class ContainerInfo:
    """Runtime data for one lab container."""

    name: str
    name_short: str = ""
    state: str = ""
    kind: str = ""
    image: str = ""
    ipv4_address: str = ""
    ipv6_address: str = ""
    interfaces: list[InterfaceInfo] = field(default_factory=list)
    label: str | None = None
    root_node_name: str | None = None


@dataclass
class InterfaceMatch:
    """Result of resolving an endpoint to a backing container interface."""

    container_name: str
    interface: InterfaceInfo | None = None


class ContainerDataProvider(ABC):
    """
    Source of runtime container data used to enrich the graph.

    Implementations must answer two synchronous queries. They may also
    define the optional hooks ``find_distributed_interface`` and
    ``find_distributed_container`` (same keyword arguments as
    :func:`clab_graph.services.distributed.sros_mapper.find_distributed_interface`
    minus ``provider``); when present they replace the built-in candidate
    search for distributed nodes.
    """

    @abstractmethod
    def find_container(self, container_name: str, lab_name: str) -> ContainerInfo | None:
        """
        Look up a container by its full or short name.

        Parameters
        ----------
        container_name : str
            Full container name (e.g. ``clab-lab-srl1``) or short name.
        lab_name : str
            Name of the lab the container belongs to.

        Returns
        -------
        ContainerInfo or None
            The container, or None when it is unknown.
        """

    @abstractmethod
    def find_interface(
        self, container_name: str, iface_name: str, lab_name: str
    ) -> InterfaceInfo | None:
        """
        Look up an interface of a container by name or alias.

        Parameters
        ----------
        container_name : str
            Full or short container name.
        iface_name : str
            Interface name or alias as written in the topology.
        lab_name : str
            Name of the lab the container belongs to.

        Returns
        -------
        InterfaceInfo or None
            The interface, or None when it is unknown.
        """
