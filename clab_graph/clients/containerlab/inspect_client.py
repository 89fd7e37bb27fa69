# clab_graph/clients/containerlab/inspect_client.py

"""
Container data provider backed by ``containerlab inspect`` output.

Two payloads feed it: the container list (``containerlab inspect --format
json``) and the per-container interface list (``containerlab inspect
interfaces --format json``). They can be read from files captured earlier
or fetched live by running the ``containerlab`` binary.
"""

import json
import logging
import os
import subprocess
from dataclasses import replace

from clab_graph.models.container import (
    ContainerDataProvider,
    ContainerInfo,
    InterfaceInfo,
    InterfaceMatch,
)
from clab_graph.services.distributed.sros_mapper import (
    component_slots,
    container_belongs_to_node,
    match_interface_in_container,
    slot_priority,
)
from clab_graph.utils.exceptions import ContainerDataError
from clab_graph.utils.helpers import is_record, strip_cidr

logger = logging.getLogger(__name__)

CONTAINERLAB_BINARY = "containerlab"
COMMAND_TIMEOUT = 30

# Interfaces containerlab reports but that never back a topology link
SKIPPED_INTERFACES = ("lo",)
UNKNOWN_STATE = "unknown"


def short_container_name(name: str, lab_name: str) -> str:
    """
    Strip the ``<prefix>-<lab>-`` part of a container name.

    ``clab-demo-srl1`` in lab ``demo`` gives ``srl1``; names that do not
    carry the lab name are returned unchanged.
    """
    if not lab_name:
        return name
    marker = f"{lab_name}-"
    start = 0
    while True:
        idx = name.find(marker, start)
        if idx < 0:
            return name
        if idx == 0 or name[idx - 1] == "-":
            return name[idx + len(marker) :]
        start = idx + 1


def _optional_int(value) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def parse_interface(data: dict) -> InterfaceInfo | None:
    name = data.get("name")
    if not isinstance(name, str) or not name:
        return None
    return InterfaceInfo(
        name=name,
        alias=data.get("alias") or "",
        mac=data.get("mac") or "",
        mtu=_optional_int(data.get("mtu")),
        state=data.get("state") or "",
        type=data.get("type") or "",
        ifindex=_optional_int(data.get("ifindex")),
    )


def parse_interface_payload(payload) -> dict[str, list[InterfaceInfo]]:
    """
    Parse ``containerlab inspect interfaces`` JSON.

    Parameters
    ----------
    payload : list
        ``[{"name": <container>, "interfaces": [...]}, ...]``.

    Returns
    -------
    dict[str, list[InterfaceInfo]]
        Interfaces per container name, loopback and ``unknown``-state
        interfaces left out.
    """
    if not isinstance(payload, list):
        raise ContainerDataError("Interface data must be a JSON list")
    result = {}
    for entry in payload:
        if not is_record(entry) or not isinstance(entry.get("name"), str):
            continue
        interfaces = []
        for raw in entry.get("interfaces") or []:
            if not is_record(raw):
                continue
            iface = parse_interface(raw)
            if iface is None:
                continue
            if iface.name in SKIPPED_INTERFACES or iface.state == UNKNOWN_STATE:
                continue
            interfaces.append(iface)
        result[entry["name"]] = sorted(interfaces, key=lambda i: i.name)
    return result


def _container_records(payload) -> list[tuple[str, dict]]:
    """Flatten both inspect layouts into ``(lab name, container record)`` pairs."""
    if not is_record(payload):
        raise ContainerDataError("Inspect data must be a JSON object")

    records = []
    if isinstance(payload.get("containers"), list):
        # Layout of containerlab releases before 0.68
        for raw in payload["containers"]:
            if is_record(raw):
                records.append((raw.get("lab_name") or "", raw))
        return records

    for lab_name, containers in payload.items():
        if not isinstance(containers, list):
            continue
        for raw in containers:
            if is_record(raw):
                records.append((raw.get("lab_name") or lab_name, raw))
    return records


def parse_inspect_payload(
    payload, interfaces: dict[str, list[InterfaceInfo]] | None = None
) -> dict[str, list[ContainerInfo]]:
    """
    Parse ``containerlab inspect`` JSON into containers grouped by lab.

    Both the grouped layout (``{"<lab>": [...]}``) and the older
    ``{"containers": [...]}`` layout are accepted.

    Raises
    ------
    ContainerDataError
        If the payload is not a JSON object.
    """
    interfaces = interfaces or {}
    labs: dict[str, list[ContainerInfo]] = {}
    for lab_name, raw in _container_records(payload):
        name = raw.get("name")
        if not isinstance(name, str) or not name:
            continue
        container = ContainerInfo(
            name=name,
            name_short=short_container_name(name, lab_name),
            state=raw.get("state") or "",
            kind=raw.get("kind") or "",
            image=raw.get("image") or "",
            ipv4_address=strip_cidr(raw.get("ipv4_address")),
            ipv6_address=strip_cidr(raw.get("ipv6_address")),
            interfaces=list(interfaces.get(name, [])),
        )
        labs.setdefault(lab_name, []).append(container)
    for containers in labs.values():
        containers.sort(key=lambda c: c.name)
    return labs


def _read_json(path: str, what: str):
    if not os.path.isfile(path):
        logger.critical(f"{what} file '{path}' does not exist!")
        raise ContainerDataError(f"{what} file '{path}' does not exist!")
    try:
        with open(path) as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        logger.critical(f"File '{path}' is not valid JSON.")
        raise ContainerDataError(f"File '{path}' is not valid JSON.") from e
    except OSError as e:
        logger.critical(f"Failed to read {what.lower()} file '{path}': {e}")
        raise ContainerDataError(f"Failed to read '{path}': {e}") from e


def _container_slot(container: ContainerInfo) -> str:
    return container.name.rsplit("-", 1)[-1].lower()


def run_containerlab(args: list[str], timeout: int = COMMAND_TIMEOUT):
    """
    Run a ``containerlab`` subcommand and decode its JSON output.

    Raises
    ------
    ContainerDataError
        If the binary is missing, exits non-zero, times out or prints
        something other than JSON.
    """
    cmd = [CONTAINERLAB_BINARY, *args]
    logger.debug(f"Running: {' '.join(cmd)}")
    try:
        proc = subprocess.run(
            cmd, capture_output=True, text=True, check=True, timeout=timeout
        )
    except FileNotFoundError as e:
        logger.error(f"'{CONTAINERLAB_BINARY}' not found in PATH")
        raise ContainerDataError(f"'{CONTAINERLAB_BINARY}' not found in PATH") from e
    except subprocess.CalledProcessError as e:
        stderr = (e.stderr or "").strip()
        logger.error(f"Command failed ({e.returncode}): {' '.join(cmd)}: {stderr}")
        raise ContainerDataError(
            f"'{' '.join(cmd)}' exited with code {e.returncode}: {stderr}"
        ) from e
    except subprocess.TimeoutExpired as e:
        logger.error(f"Command timed out after {timeout}s: {' '.join(cmd)}")
        raise ContainerDataError(f"'{' '.join(cmd)}' timed out") from e

    output = proc.stdout.strip()
    if not output:
        return {}
    try:
        return json.loads(output)
    except json.JSONDecodeError as e:
        raise ContainerDataError(f"'{' '.join(cmd)}' did not print JSON") from e


class InspectDataProvider(ContainerDataProvider):
    """
    Answers container and interface queries from inspect payloads.

    Parameters
    ----------
    labs : dict[str, list[ContainerInfo]]
        Containers grouped by lab name, as returned by
        :func:`parse_inspect_payload`.
    """

    def __init__(self, labs: dict[str, list[ContainerInfo]]):
        self.labs = labs

    @classmethod
    def from_payloads(cls, inspect_data, interface_data=None) -> "InspectDataProvider":
        interfaces = (
            parse_interface_payload(interface_data) if interface_data is not None else {}
        )
        return cls(parse_inspect_payload(inspect_data, interfaces))

    @classmethod
    def from_files(
        cls, inspect_path: str, interface_path: str | None = None
    ) -> "InspectDataProvider":
        """
        Build a provider from captured ``inspect`` JSON files.

        Raises
        ------
        ContainerDataError
            If a file is missing or malformed.
        """
        logger.info(f"Loading container data from '{inspect_path}'")
        inspect_data = _read_json(inspect_path, "Inspect data")
        interface_data = None
        if interface_path:
            logger.info(f"Loading interface data from '{interface_path}'")
            interface_data = _read_json(interface_path, "Interface data")
        provider = cls.from_payloads(inspect_data, interface_data)
        logger.info(f"Loaded {provider.container_count()} container(s)")
        return provider

    @classmethod
    def from_containerlab(cls, topology_path: str | None = None) -> "InspectDataProvider":
        """
        Query a running containerlab for the current lab state.

        Parameters
        ----------
        topology_path : str, optional
            Restricts the query to one lab; all labs are inspected otherwise.
        """
        scope = ["-t", topology_path] if topology_path else ["--all"]
        logger.info("Fetching container data from containerlab")
        inspect_data = run_containerlab(["inspect", *scope, "--format", "json"])
        interface_data = run_containerlab(
            ["inspect", "interfaces", *scope, "--format", "json"]
        )
        if is_record(interface_data) and not interface_data:
            interface_data = []
        return cls.from_payloads(inspect_data, interface_data)

    def container_count(self) -> int:
        return sum(len(containers) for containers in self.labs.values())

    def containers_in_lab(self, lab_name: str) -> list[ContainerInfo]:
        """Containers of one lab; every container when the lab is not known by name."""
        if lab_name in self.labs:
            return self.labs[lab_name]
        return [c for containers in self.labs.values() for c in containers]

    def find_container(self, container_name: str, lab_name: str) -> ContainerInfo | None:
        for container in self.containers_in_lab(lab_name):
            if container_name in (container.name, container.name_short):
                return container
        return None

    def find_interface(
        self, container_name: str, iface_name: str, lab_name: str
    ) -> InterfaceInfo | None:
        container = self.find_container(container_name, lab_name)
        if container is None:
            logger.info(f"Container '{container_name}' not found in lab '{lab_name}'")
            return None
        for iface in container.interfaces:
            if iface_name in (iface.name, iface.alias):
                return iface
        return None

    def distributed_containers(
        self,
        base_node_name: str,
        full_prefix: str,
        lab_name: str,
        components: list | None = None,
    ) -> list[ContainerInfo]:
        """
        Component containers of a distributed node, ``a`` and ``b`` slots first.

        When ``components`` declares slots, only containers for those slots
        are returned; otherwise every container named after the node is.
        """
        slots = component_slots(components or [])
        members = []
        for container in self.containers_in_lab(lab_name):
            if not container_belongs_to_node(container, base_node_name, full_prefix):
                continue
            if slots and _container_slot(container) not in slots:
                continue
            members.append(replace(container, root_node_name=base_node_name))
        return sorted(members, key=lambda c: slot_priority(_container_slot(c)))

    def find_distributed_container(
        self, *, base_node_name, full_prefix, lab_name, components
    ) -> ContainerInfo | None:
        members = self.distributed_containers(
            base_node_name, full_prefix, lab_name, components
        )
        return members[0] if members else None

    def find_distributed_interface(
        self, *, base_node_name, iface_name, full_prefix, lab_name, components
    ) -> InterfaceMatch | None:
        for container in self.distributed_containers(
            base_node_name, full_prefix, lab_name, components
        ):
            iface = match_interface_in_container(container, iface_name)
            if iface is not None:
                return InterfaceMatch(container_name=container.name, interface=iface)
        return None
