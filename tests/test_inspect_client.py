"""Tests for the containerlab inspect backed provider."""

import json
import subprocess

import pytest

from clab_graph.clients.containerlab import inspect_client
from clab_graph.clients.containerlab.inspect_client import (
    InspectDataProvider,
    parse_inspect_payload,
    parse_interface_payload,
    short_container_name,
)
from clab_graph.utils.exceptions import ContainerDataError

GROUPED_INSPECT = {
    "demo": [
        {
            "lab_name": "demo",
            "name": "clab-demo-srl1",
            "kind": "nokia_srlinux",
            "image": "ghcr.io/nokia/srlinux",
            "state": "running",
            "ipv4_address": "172.20.20.2/24",
            "ipv6_address": "3fff:172:20:20::2/64",
            "owner": "admin",
        },
        {
            "lab_name": "demo",
            "name": "clab-demo-sr1-a",
            "kind": "nokia_srsim",
            "state": "running",
            "ipv4_address": "N/A",
        },
        {
            "lab_name": "demo",
            "name": "clab-demo-sr1-1",
            "kind": "nokia_srsim",
            "state": "running",
        },
    ],
    "other": [{"lab_name": "other", "name": "clab-other-srl1", "state": "exited"}],
}

LEGACY_INSPECT = {
    "containers": [
        {"lab_name": "demo", "name": "clab-demo-srl1", "state": "running"},
    ]
}

INTERFACES = [
    {
        "name": "clab-demo-srl1",
        "interfaces": [
            {"name": "lo", "state": "up", "type": "device"},
            {
                "name": "e1-1",
                "alias": "ethernet-1/1",
                "mac": "aa:c1:ab:00:00:01",
                "mtu": 9232,
                "ifindex": 12,
                "type": "veth",
                "state": "up",
            },
            {"name": "mgmt0", "state": "unknown", "type": "veth"},
        ],
    },
    {
        "name": "clab-demo-sr1-1",
        "interfaces": [{"name": "e1-1-c1-1", "state": "down", "mtu": "1500"}],
    },
]


class TestParsing:
    """Both inspect layouts and the interfaces payload."""

    def test_short_container_name(self):
        assert short_container_name("clab-demo-srl1", "demo") == "srl1"
        assert short_container_name("demo-srl1", "demo") == "srl1"
        assert short_container_name("clab-demox-srl1", "demo") == "clab-demox-srl1"
        assert short_container_name("srl1", "") == "srl1"

    def test_grouped_layout(self):
        labs = parse_inspect_payload(GROUPED_INSPECT)
        srl1 = next(c for c in labs["demo"] if c.name == "clab-demo-srl1")

        assert set(labs) == {"demo", "other"}
        assert srl1.name_short == "srl1"
        assert srl1.ipv4_address == "172.20.20.2"
        assert srl1.ipv6_address == "3fff:172:20:20::2"
        assert srl1.kind == "nokia_srlinux"

    def test_legacy_layout(self):
        labs = parse_inspect_payload(LEGACY_INSPECT)
        assert [c.name_short for c in labs["demo"]] == ["srl1"]

    def test_not_a_mapping(self):
        with pytest.raises(ContainerDataError):
            parse_inspect_payload(["clab-demo-srl1"])

    def test_interfaces_filtered(self):
        interfaces = parse_interface_payload(INTERFACES)
        srl1 = interfaces["clab-demo-srl1"]

        assert [i.name for i in srl1] == ["e1-1"]
        assert srl1[0].alias == "ethernet-1/1"
        assert srl1[0].mtu == 9232
        assert srl1[0].ifindex == 12
        assert interfaces["clab-demo-sr1-1"][0].mtu == 1500

    def test_interfaces_not_a_list(self):
        with pytest.raises(ContainerDataError):
            parse_interface_payload({"name": "x"})


class TestProvider:
    """Container and interface lookups."""

    def _provider(self):
        return InspectDataProvider.from_payloads(GROUPED_INSPECT, INTERFACES)

    def test_find_container(self):
        provider = self._provider()
        assert provider.find_container("clab-demo-srl1", "demo").state == "running"
        assert provider.find_container("srl1", "demo").name == "clab-demo-srl1"
        assert provider.find_container("srl1", "other").state == "exited"
        assert provider.find_container("nope", "demo") is None
        assert provider.container_count() == 4

    def test_find_interface_by_name_or_alias(self):
        provider = self._provider()
        assert provider.find_interface("srl1", "e1-1", "demo").mac == "aa:c1:ab:00:00:01"
        assert provider.find_interface("srl1", "ethernet-1/1", "demo").name == "e1-1"
        assert provider.find_interface("srl1", "lo", "demo") is None
        assert provider.find_interface("ghost", "e1-1", "demo") is None

    def test_distributed_hooks(self):
        provider = self._provider()
        container = provider.find_distributed_container(
            base_node_name="sr1", full_prefix="clab-demo", lab_name="demo", components=[]
        )
        match = provider.find_distributed_interface(
            base_node_name="sr1",
            iface_name="1/1/c1/1",
            full_prefix="clab-demo",
            lab_name="demo",
            components=[],
        )

        assert container.name == "clab-demo-sr1-a"
        assert match.container_name == "clab-demo-sr1-1"
        assert match.interface.state == "down"

    def test_distributed_hooks_follow_declared_slots(self):
        provider = self._provider()
        line_card_only = [{"slot": "1"}]
        container = provider.find_distributed_container(
            base_node_name="sr1",
            full_prefix="clab-demo",
            lab_name="demo",
            components=line_card_only,
        )
        cpm_only = provider.distributed_containers(
            "sr1", "clab-demo", "demo", [{"slot": "A"}]
        )
        match = provider.find_distributed_interface(
            base_node_name="sr1",
            iface_name="1/1/c1/1",
            full_prefix="clab-demo",
            lab_name="demo",
            components=[{"slot": "a"}],
        )

        assert container.name == "clab-demo-sr1-1"
        assert container.root_node_name == "sr1"
        assert [c.name for c in cpm_only] == ["clab-demo-sr1-a"]
        assert match is None

    def test_from_files(self, tmp_path):
        inspect_file = tmp_path / "inspect.json"
        inspect_file.write_text(json.dumps(GROUPED_INSPECT))
        interfaces_file = tmp_path / "interfaces.json"
        interfaces_file.write_text(json.dumps(INTERFACES))

        provider = InspectDataProvider.from_files(str(inspect_file), str(interfaces_file))
        assert provider.find_interface("srl1", "e1-1", "demo") is not None

    def test_from_files_errors(self, tmp_path):
        broken = tmp_path / "broken.json"
        broken.write_text("{not json")

        with pytest.raises(ContainerDataError, match="does not exist"):
            InspectDataProvider.from_files(str(tmp_path / "missing.json"))
        with pytest.raises(ContainerDataError, match="not valid JSON"):
            InspectDataProvider.from_files(str(broken))


class TestLiveMode:
    """Running the containerlab binary."""

    def test_from_containerlab(self, monkeypatch):
        calls = []

        def fake_run(cmd, **kwargs):
            calls.append(cmd)
            payload = INTERFACES if "interfaces" in cmd else GROUPED_INSPECT
            return subprocess.CompletedProcess(cmd, 0, stdout=json.dumps(payload), stderr="")

        monkeypatch.setattr(inspect_client.subprocess, "run", fake_run)
        provider = InspectDataProvider.from_containerlab("lab.clab.yml")

        assert calls[0] == ["containerlab", "inspect", "-t", "lab.clab.yml", "--format", "json"]
        assert calls[1][:2] == ["containerlab", "inspect"]
        assert "interfaces" in calls[1]
        assert provider.find_interface("srl1", "e1-1", "demo") is not None

    def test_command_failure(self, monkeypatch):
        def fake_run(cmd, **kwargs):
            raise subprocess.CalledProcessError(1, cmd, stderr="permission denied")

        monkeypatch.setattr(inspect_client.subprocess, "run", fake_run)
        with pytest.raises(ContainerDataError, match="permission denied"):
            InspectDataProvider.from_containerlab()

    def test_binary_missing(self, monkeypatch):
        def fake_run(cmd, **kwargs):
            raise FileNotFoundError(cmd[0])

        monkeypatch.setattr(inspect_client.subprocess, "run", fake_run)
        with pytest.raises(ContainerDataError, match="not found"):
            InspectDataProvider.from_containerlab()
