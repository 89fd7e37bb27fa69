"""Shared fixtures: topology builders and an in-memory container provider."""

import logging

import pytest
import yaml

from clab_graph.models.annotations import TopologyAnnotations
from clab_graph.models.container import (
    ContainerDataProvider,
    ContainerInfo,
    InterfaceInfo,
    InterfaceMatch,
)
from clab_graph.models.topology import Topology


class FakeProvider(ContainerDataProvider):
    """Container data held in a dict; records every lookup it answers."""

    def __init__(self, containers=None, lab_name="demo"):
        self.lab_name = lab_name
        self.containers = {c.name: c for c in (containers or [])}
        self.container_lookups = []
        self.interface_lookups = []

    def find_container(self, container_name, lab_name):
        self.container_lookups.append((container_name, lab_name))
        for container in self.containers.values():
            if container_name in (container.name, container.name_short):
                return container
        return None

    def find_interface(self, container_name, iface_name, lab_name):
        self.interface_lookups.append((container_name, iface_name, lab_name))
        container = self.find_container(container_name, lab_name)
        if container is None:
            return None
        for iface in container.interfaces:
            if iface_name in (iface.name, iface.alias):
                return iface
        return None


class HookedProvider(FakeProvider):
    """A provider that answers distributed-node queries itself."""

    def __init__(self, containers=None, distributed=None, lab_name="demo"):
        super().__init__(containers, lab_name)
        self.distributed = distributed or {}
        self.hook_calls = []

    def find_distributed_interface(
        self, *, base_node_name, iface_name, full_prefix, lab_name, components
    ):
        self.hook_calls.append(("interface", base_node_name, iface_name))
        container = self.distributed.get(base_node_name)
        if container is None:
            return None
        for iface in container.interfaces:
            if iface.name == iface_name or iface.alias == iface_name:
                return InterfaceMatch(container.name, iface)
        return None

    def find_distributed_container(
        self, *, base_node_name, full_prefix, lab_name, components
    ):
        self.hook_calls.append(("container", base_node_name))
        return self.distributed.get(base_node_name)


def make_container(name, short="", state="running", interfaces=None, **kwargs):
    return ContainerInfo(
        name=name,
        name_short=short or name,
        state=state,
        interfaces=list(interfaces or []),
        **kwargs,
    )


def make_iface(name, state="up", **kwargs):
    return InterfaceInfo(name=name, state=state, **kwargs)


def topology_from_yaml(text: str) -> Topology:
    return Topology(yaml.safe_load(text))


@pytest.fixture
def make_topology():
    return topology_from_yaml


@pytest.fixture
def make_annotations():
    return TopologyAnnotations.from_dict


@pytest.fixture
def test_logger():
    return logging.getLogger("clab_graph.tests")


@pytest.fixture
def two_node_topology():
    return topology_from_yaml(
        """
name: demo
topology:
  nodes:
    srl1:
      kind: nokia_srlinux
    srl2:
      kind: nokia_srlinux
  links:
    - endpoints: ["srl1:e1-1", "srl2:e1-1"]
"""
    )
