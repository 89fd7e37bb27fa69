# clab_graph/utils/constants.py

SUBSTEP_INDENT = "    "

# Link types
LINK_TYPE_VETH = "veth"
LINK_TYPE_HOST = "host"
LINK_TYPE_MGMT_NET = "mgmt-net"
LINK_TYPE_MACVLAN = "macvlan"
LINK_TYPE_DUMMY = "dummy"
LINK_TYPE_VXLAN = "vxlan"
LINK_TYPE_VXLAN_STITCH = "vxlan-stitch"

# Link types that declare a single `endpoint` and imply the far side
SINGLE_ENDPOINT_TYPES = (
    LINK_TYPE_HOST,
    LINK_TYPE_MGMT_NET,
    LINK_TYPE_MACVLAN,
    LINK_TYPE_DUMMY,
    LINK_TYPE_VXLAN,
    LINK_TYPE_VXLAN_STITCH,
)

# Single-endpoint types whose synthetic id is derived from `host-interface`
HOST_INTERFACE_TYPES = (LINK_TYPE_HOST, LINK_TYPE_MGMT_NET, LINK_TYPE_MACVLAN)

PREFIX_MACVLAN = "macvlan:"
PREFIX_VXLAN = "vxlan:"
PREFIX_VXLAN_STITCH = "vxlan-stitch:"
PREFIX_DUMMY = "dummy"

# Node kinds
KIND_BRIDGE = "bridge"
KIND_OVS_BRIDGE = "ovs-bridge"
BRIDGE_KINDS = (KIND_BRIDGE, KIND_OVS_BRIDGE)
KIND_DISTRIBUTED_SROS = "nokia_srsim"

ROUTER_KINDS = frozenset(
    {
        "nokia_srlinux",
        "nokia_sros",
        "nokia_srsim",
        "arista_ceos",
        "arista_veos",
        "cisco_xrd",
        "cisco_xrv",
        "cisco_xrv9k",
        "juniper_crpd",
        "juniper_vjunos_router",
        "juniper_vjunos_switch",
        "juniper_vmx",
        "juniper_vqfx",
        "juniper_vsrx",
        "frr",
        "gobgp",
        "bird",
        "openbgpd",
    }
)

CLIENT_KINDS = frozenset({"linux", "alpine", "debian", "ubuntu", "centos", "rocky"})

# Built-in interface naming per kind; "{n}" is the port number placeholder
DEFAULT_INTERFACE_PATTERNS = {
    "nokia_srlinux": "e1-{n}",
    "nokia_sros": "1/1/{n}",
    "nokia_srsim": "1/1/c{n}/1",
    "arista_ceos": "eth{n}",
    "arista_veos": "eth{n}",
    "cisco_xrd": "Gi0-0-0-{n}",
    "cisco_xrv": "Gi0/0/0/{n}",
    "cisco_xrv9k": "Gi0/0/0/{n}",
    "cisco_csr1000v": "Gi{n}",
    "cisco_c8000v": "Gi{n}",
    "cisco_cat9kv": "Gi1/0/{n}",
    "cisco_iol": "Ethernet0/{n}",
    "cisco_nxos": "Ethernet1/{n}",
    "juniper_crpd": "eth{n}",
    "juniper_vmx": "ge-0/0/{n}",
    "juniper_vsrx": "ge-0/0/{n}",
    "juniper_vjunos_router": "ge-0/0/{n}",
    "juniper_vjunos_switch": "ge-0/0/{n}",
    "juniper_vjunosevolved": "et-0/0/{n}",
    "juniper_vqfx": "xe-0/0/{n}",
    "sonic-vs": "Ethernet{n}",
    "cumulus_cvx": "swp{n}",
    "mikrotik_ros": "ether{n}",
    "fortinet_fortigate": "port{n}",
    "paloalto_panos": "ethernet1/{n}",
}

# Legacy node labels that carried visual placement before the annotation sidecar
GRAPH_LABEL_POS_X = "graph-posX"
GRAPH_LABEL_POS_Y = "graph-posY"
GRAPH_LABEL_ICON = "graph-icon"
GRAPH_LABEL_GROUP = "graph-group"
GRAPH_LABEL_LEVEL = "graph-level"
GRAPH_LABEL_GROUP_LABEL_POS = "graph-groupLabelPos"
GRAPH_LABEL_GEO_LAT = "graph-geoCoordinateLat"
GRAPH_LABEL_GEO_LNG = "graph-geoCoordinateLng"

GRAPH_LABEL_KEYS = (
    GRAPH_LABEL_POS_X,
    GRAPH_LABEL_POS_Y,
    GRAPH_LABEL_ICON,
    GRAPH_LABEL_GROUP,
    GRAPH_LABEL_LEVEL,
    GRAPH_LABEL_GROUP_LABEL_POS,
    GRAPH_LABEL_GEO_LAT,
    GRAPH_LABEL_GEO_LNG,
)

ROLE_LABEL = "topoViewer-role"

# Element classes
CLASS_SPECIAL_ENDPOINT = "special-endpoint"
CLASS_STUB_LINK = "stub-link"
CLASS_LINK_UP = "link-up"
CLASS_LINK_DOWN = "link-down"
CLASS_ALIASED_BASE_BRIDGE = "aliased-base-bridge"

EDGE_ID_PREFIX = "Clab-Link"
SPECIAL_NODE_INDEX = "999"

# Extended link validation tags
ERR_INVALID_VETH_ENDPOINTS = "invalid-veth-endpoints"
ERR_INVALID_ENDPOINT = "invalid-endpoint"
ERR_MISSING_HOST_INTERFACE = "missing-host-interface"
ERR_MISSING_REMOTE = "missing-remote"
ERR_MISSING_VNI = "missing-vni"
ERR_MISSING_DST_PORT = "missing-dst-port"

STATS_KEYS = (
    "rxBps",
    "rxPps",
    "rxBytes",
    "rxPackets",
    "txBps",
    "txPps",
    "txBytes",
    "txPackets",
    "statsIntervalSeconds",
)
