"""Tests for graph serialization and the text summary."""

import json

import yaml
from conftest import topology_from_yaml

from clab_graph.services.compiler.topology_compiler import compile_topology
from clab_graph.services.export.graph_exporter import (
    GraphExporter,
    OutputFormat,
    render_summary,
)
from clab_graph.utils.yaml_processor import YAMLProcessor

SMALL_TOPOLOGY = """
name: demo
topology:
  nodes:
    srl1:
      kind: nokia_srlinux
    srl2:
      kind: nokia_srlinux
  links:
    - endpoints: ["srl1:e1-1", "srl2:e1-1"]
    - type: vxlan
      endpoint: {node: srl2, interface: e1-2}
      remote: 10.0.0.9
"""


def small_result():
    return compile_topology(topology_from_yaml(SMALL_TOPOLOGY))


class TestGraphExporter:
    """JSON and YAML output."""

    def test_json_dumps(self):
        data = json.loads(GraphExporter(small_result()).dumps())
        assert data["labName"] == "demo"
        assert [e["data"]["id"] for e in data["elements"]][:2] == ["srl1", "srl2"]

    def test_yaml_write(self, tmp_path):
        out = tmp_path / "graph.yaml"
        GraphExporter(small_result(), OutputFormat.YAML).write(str(out))
        data = yaml.safe_load(out.read_text())

        assert data["prefix"] == "clab-demo"
        assert data["pendingMigrations"][0]["nodeId"] == "srl1"

    def test_yaml_layout(self):
        shared_labels = {"role": "spine"}
        text = YAMLProcessor().dump_yaml(
            {
                "a": {"labels": shared_labels, "position": {"x": 10, "y": 20}},
                "b": {"labels": shared_labels, "position": {"x": 0, "y": 0}},
            }
        )

        assert "position: {x: 10, y: 20}" in text
        assert "&id" not in text and "*id" not in text
        assert "labels:\n    role: spine" in text

    def test_json_write(self, tmp_path):
        out = tmp_path / "graph.json"
        GraphExporter(small_result(), "json").write(str(out))
        assert json.loads(out.read_text())["isPresetLayout"] is False


class TestSummary:
    """Rendered text summary."""

    def test_render_summary(self):
        text = render_summary(small_result())

        assert "Lab: demo" in text
        assert "Nodes (3):" in text
        assert "srl1 [router, nokia_srlinux]" in text
        assert "Clab-Link0: srl1:e1-1 <-> srl2:e1-1" in text
        assert "errors: missing-vni, missing-dst-port" in text
        assert "Interface pattern migrations (2):" in text
