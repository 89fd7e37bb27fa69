"""Tests for kind/group/defaults inheritance."""

from conftest import topology_from_yaml

from clab_graph.services.config.node_config_resolver import (
    inherited_properties,
    resolve_kind,
    resolve_node_config,
)

INHERITANCE_TOPOLOGY = """
name: inherit
topology:
  defaults:
    image: default:latest
    labels:
      site: lab
      tier: default
  kinds:
    nokia_srlinux:
      image: ghcr.io/nokia/srlinux:24.10
      type: ixrd3
      labels:
        tier: kind
        vendor: nokia
  groups:
    spines:
      kind: nokia_srlinux
      type: ixrd2
      labels:
        role: spine
    G:
      kind: Y
  nodes:
    s1:
      group: spines
      labels:
        tier: node
    s2:
      group: spines
      type: ixrd5
    r2:
      group: G
    bare: {}
    nulled:
"""


class TestResolveKind:
    """Kind lookup through node, group and defaults."""

    def test_node_kind_wins(self):
        topo = topology_from_yaml(INHERITANCE_TOPOLOGY)
        assert resolve_kind(topo, {"kind": "linux", "group": "spines"}) == "linux"

    def test_group_kind_used_when_node_has_none(self):
        topo = topology_from_yaml(INHERITANCE_TOPOLOGY)
        assert resolve_kind(topo, topo.node_config("r2")) == "Y"

    def test_unknown_kind_is_none(self):
        topo = topology_from_yaml(INHERITANCE_TOPOLOGY)
        assert resolve_kind(topo, topo.node_config("bare")) is None


class TestResolveNodeConfig:
    """Precedence node > group > kind > defaults."""

    def test_scalar_precedence(self):
        topo = topology_from_yaml(INHERITANCE_TOPOLOGY)
        s1 = resolve_node_config(topo, topo.node_config("s1"))
        s2 = resolve_node_config(topo, topo.node_config("s2"))

        assert s1["kind"] == "nokia_srlinux"
        assert s1["type"] == "ixrd2"
        assert s1["image"] == "ghcr.io/nokia/srlinux:24.10"
        assert s2["type"] == "ixrd5"

    def test_labels_merge_keywise(self):
        topo = topology_from_yaml(INHERITANCE_TOPOLOGY)
        merged = resolve_node_config(topo, topo.node_config("s1"))

        assert merged["labels"] == {
            "site": "lab",
            "tier": "node",
            "vendor": "nokia",
            "role": "spine",
        }

    def test_group_kind_resolves_without_kind_table(self):
        topo = topology_from_yaml(INHERITANCE_TOPOLOGY)
        merged = resolve_node_config(topo, topo.node_config("r2"))
        assert merged["kind"] == "Y"
        assert merged["image"] == "default:latest"

    def test_missing_kind_is_not_set(self):
        topo = topology_from_yaml(INHERITANCE_TOPOLOGY)
        merged = resolve_node_config(topo, topo.node_config("bare"))
        assert "kind" not in merged
        assert merged["labels"] == {"site": "lab", "tier": "default"}

    def test_null_node_entry_resolves_from_defaults(self):
        topo = topology_from_yaml(INHERITANCE_TOPOLOGY)
        merged = resolve_node_config(topo, topo.node_config("nulled"))
        assert merged["image"] == "default:latest"

    def test_document_is_not_mutated(self):
        topo = topology_from_yaml(INHERITANCE_TOPOLOGY)
        merged = resolve_node_config(topo, topo.node_config("s1"))
        merged["labels"]["site"] = "changed"

        assert topo.defaults["labels"]["site"] == "lab"
        assert topo.node_config("s1") == {"group": "spines", "labels": {"tier": "node"}}

    def test_inherited_properties(self):
        topo = topology_from_yaml(INHERITANCE_TOPOLOGY)
        node_config = topo.node_config("s2")
        merged = resolve_node_config(topo, node_config)
        inherited = inherited_properties(node_config, merged)

        assert "image" in inherited
        assert "kind" in inherited
        assert "type" not in inherited
        assert "group" not in inherited
