"""Tests for link normalization and synthetic special ids."""

import logging

import pytest
from conftest import topology_from_yaml

from clab_graph.models.link import EndpointParts, split_endpoint
from clab_graph.services.links.link_normalizer import (
    CompileContext,
    build_container_name,
    extract_endpoint_mac,
    normalize_link,
    normalize_links,
    resolve_actual_node,
    should_omit_endpoint,
)


class TestSplitEndpoint:
    """String and object endpoints parse the same way."""

    @pytest.mark.parametrize(
        "endpoint, expected",
        [
            ("srl1:e1-1", EndpointParts("srl1", "e1-1")),
            ({"node": "srl1", "interface": "e1-1"}, EndpointParts("srl1", "e1-1")),
            ("br1", EndpointParts("br1")),
            ("macvlan:eth1", EndpointParts("macvlan:eth1")),
            ("vxlan:vxlan0", EndpointParts("vxlan:vxlan0")),
            ("vxlan-stitch:vxlan3", EndpointParts("vxlan-stitch:vxlan3")),
            ("dummy2", EndpointParts("dummy2")),
            ("a:b:c", EndpointParts("a:b:c")),
            ({"node": "srl1"}, EndpointParts("srl1")),
            (42, EndpointParts("")),
        ],
    )
    def test_split(self, endpoint, expected):
        assert split_endpoint(endpoint) == expected


class TestCompileContext:
    """Counter allocation is cached per (type, link index)."""

    def test_counters_per_type(self):
        ctx = CompileContext()
        assert ctx.allocate("vxlan", 0) == "vxlan:vxlan0"
        assert ctx.allocate("vxlan", 3) == "vxlan:vxlan1"
        assert ctx.allocate("vxlan-stitch", 4) == "vxlan-stitch:vxlan0"
        assert ctx.allocate("dummy", 5) == "dummy0"

    def test_same_link_same_id(self):
        ctx = CompileContext()
        first = ctx.allocate("dummy", 7)
        again = ctx.allocate("dummy", 7)
        assert first == again == "dummy0"
        assert ctx.counters["dummy"] == 1


class TestNormalizeLink:
    """Classification of veth, single-endpoint and malformed links."""

    def test_implicit_veth(self):
        link = {"endpoints": ["srl1:e1-1", "srl2:e1-1"]}
        normalized = normalize_link(link, 0, CompileContext())

        assert normalized.source == EndpointParts("srl1", "e1-1")
        assert normalized.target == EndpointParts("srl2", "e1-1")
        assert normalized.link_type == ""
        assert not normalized.is_extended
        assert normalized.is_veth

    def test_extended_veth_objects(self):
        link = {
            "type": "veth",
            "endpoints": [
                {"node": "srl1", "interface": "e1-1", "mac": "aa:bb:cc:00:00:01"},
                {"node": "srl2", "interface": "e1-1"},
            ],
        }
        normalized = normalize_link(link, 0, CompileContext())
        assert normalized.is_extended
        assert normalized.target == EndpointParts("srl2", "e1-1")

    @pytest.mark.parametrize(
        "link_type, expected",
        [
            ("host", "host:eth5"),
            ("mgmt-net", "mgmt-net:eth5"),
            ("macvlan", "macvlan:eth5"),
        ],
    )
    def test_host_interface_types(self, link_type, expected):
        link = {
            "type": link_type,
            "endpoint": {"node": "srl1", "interface": "e1-9"},
            "host-interface": "eth5",
        }
        normalized = normalize_link(link, 0, CompileContext())
        assert normalized.end_b == expected

    def test_counter_types(self):
        ctx = CompileContext()
        vxlan = {"type": "vxlan", "endpoint": "srl1:e1-2", "remote": "10.0.0.1"}
        dummy = {"type": "dummy", "endpoint": "srl1:e1-3"}

        assert normalize_link(vxlan, 0, ctx).end_b == "vxlan:vxlan0"
        assert normalize_link(dummy, 1, ctx).end_b == "dummy0"
        assert normalize_link(vxlan, 0, ctx).end_b == "vxlan:vxlan0"

    @pytest.mark.parametrize(
        "link",
        [
            "not-a-mapping",
            {"endpoints": ["srl1:e1-1"]},
            {"endpoints": ["srl1:e1-1", None]},
            {"endpoints": ["srl1:e1-1", 5]},
            {"type": "veth", "endpoints": [{"node": 1}, "srl2:e1-1"]},
            {"type": "dummy"},
            {"type": "vxlan", "endpoint": ["srl1", "e1-1"], "remote": "1.1.1.1"},
        ],
    )
    def test_malformed_links_rejected(self, link):
        assert normalize_link(link, 0, CompileContext()) is None

    def test_rejected_link_allocates_nothing(self):
        ctx = CompileContext()
        bad = {"type": "vxlan", "endpoint": 12, "remote": "1.1.1.1"}
        assert normalize_link(bad, 0, ctx) is None
        assert ctx.counters["vxlan"] == 0

    def test_rejection_is_logged(self, caplog):
        with caplog.at_level(logging.WARNING):
            normalize_link({"endpoints": []}, 4, CompileContext())
        assert "Link #4" in caplog.text


class TestNormalizeLinks:
    """Whole-topology normalization keeps document order."""

    def test_malformed_links_dropped(self):
        topo = topology_from_yaml(
            """
topology:
  nodes: {a: {}, b: {}}
  links:
    - endpoints: ["a:eth1", "b:eth1"]
    - endpoints: ["a:eth2"]
    - type: dummy
      endpoint: a:eth3
    - type: dummy
      endpoint: b:eth3
"""
        )
        links = normalize_links(topo, CompileContext())

        assert [link.index for link in links] == [0, 2, 3]
        assert [link.end_b for link in links[1:]] == ["dummy0", "dummy1"]


class TestEndpointHelpers:
    """Actual node ids, container names and omitted interfaces."""

    def test_resolve_actual_node(self):
        assert resolve_actual_node("host", "eth1") == "host:eth1"
        assert resolve_actual_node("mgmt-net", "eth2") == "mgmt-net:eth2"
        assert resolve_actual_node("srl1", "e1-1") == "srl1"

    def test_build_container_name(self):
        assert build_container_name("srl1", "srl1", "clab-demo") == "clab-demo-srl1"
        assert build_container_name("srl1", "srl1", "") == "srl1"
        assert build_container_name("host", "host:eth1", "clab-demo") == "host:eth1"
        assert build_container_name("dummy0", "dummy0", "clab-demo") == "dummy0"

    def test_should_omit_endpoint(self):
        assert should_omit_endpoint("host")
        assert should_omit_endpoint("mgmt-net")
        assert should_omit_endpoint("macvlan:eth1")
        assert should_omit_endpoint("dummy0")
        assert not should_omit_endpoint("vxlan:vxlan0")
        assert not should_omit_endpoint("srl1")

    def test_extract_endpoint_mac(self):
        assert extract_endpoint_mac({"node": "a", "mac": "aa:bb"}) == "aa:bb"
        assert extract_endpoint_mac("a:eth1") == ""
