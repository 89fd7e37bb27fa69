# clab_graph/models/topology.py

import json
import logging
import os

import yaml

from clab_graph.utils.exceptions import TopologyFileError
from clab_graph.utils.helpers import is_record
from clab_graph.utils.yaml_processor import YAMLProcessor

logger = logging.getLogger(__name__)


class Topology:
    """
    Read-only view over a parsed containerlab topology document.

    The wrapped document is never modified. Accessors return the raw
    sections (or empty containers when a section is missing) so callers
    do not need to guard every lookup.

    Parameters
    ----------
    document : dict
        The parsed YAML/JSON document (top-level ``name``, ``prefix`` and
        ``topology`` keys).
    source_path : str
        Path of the file the document was loaded from, if any.
    """

    def __init__(self, document, source_path=""):
        self.document = document if is_record(document) else {}
        self.source_path = source_path

    def __repr__(self):
        """
        Return a string representation of the topology.

        Returns
        -------
        str
            Description of the topology name and number of nodes and links.
        """
        return (
            f"Topology(name={self.name}, nodes={len(self.nodes)}, "
            f"links={len(self.links)})"
        )

    @property
    def name(self) -> str:
        name = self.document.get("name")
        return name if isinstance(name, str) else ""

    @property
    def prefix(self) -> str | None:
        prefix = self.document.get("prefix")
        if prefix is None:
            return None
        return str(prefix)

    @property
    def section(self) -> dict | None:
        """The ``topology`` mapping, or ``None`` when it is missing."""
        section = self.document.get("topology")
        return section if is_record(section) else None

    def has_topology(self) -> bool:
        return self.section is not None

    def has_nodes_section(self) -> bool:
        return self.section is not None and is_record(self.section.get("nodes"))

    def _fragment(self, key) -> dict:
        if self.section is None:
            return {}
        value = self.section.get(key)
        return value if is_record(value) else {}

    @property
    def nodes(self) -> dict:
        return self._fragment("nodes")

    @property
    def kinds(self) -> dict:
        return self._fragment("kinds")

    @property
    def groups(self) -> dict:
        return self._fragment("groups")

    @property
    def defaults(self) -> dict:
        return self._fragment("defaults")

    @property
    def links(self) -> list:
        if self.section is None:
            return []
        links = self.section.get("links")
        return links if isinstance(links, list) else []

    def node_ids(self) -> set:
        return set(self.nodes.keys())

    def node_config(self, node_name) -> dict:
        """Return a node's declared config; a null YAML entry becomes ``{}``."""
        node = self.nodes.get(node_name)
        return node if is_record(node) else {}

    def get_lab_name(self, override: str | None = None) -> str:
        """
        Return the lab name used for container lookups.

        Parameters
        ----------
        override : str | None
            Lab name supplied by the caller; wins over the document name.

        Returns
        -------
        str
            The lab name, or ``""`` when neither is available.
        """
        if override:
            return override
        return self.name

    def get_full_prefix(self, lab_name: str) -> str:
        """
        Compute the container name prefix the way containerlab does.

        An absent ``prefix`` yields ``clab-<lab>``, a blank one disables the
        prefix entirely and any other value yields ``<prefix>-<lab>``.

        Parameters
        ----------
        lab_name : str
            The resolved lab name.

        Returns
        -------
        str
            The prefix to prepend to node names (without trailing dash).
        """
        prefix = self.prefix
        if prefix is None:
            return f"clab-{lab_name}"
        if prefix.strip() == "":
            return ""
        return f"{prefix.strip()}-{lab_name}"


def parse_topology_document(text: str, source_path: str = "") -> Topology:
    """
    Parse topology YAML (or JSON, which is a YAML subset) into a Topology.

    Parameters
    ----------
    text : str
        The document content.
    source_path : str
        Path used in error messages.

    Returns
    -------
    Topology
        The wrapped document.

    Raises
    ------
    TopologyFileError
        If the content is not valid YAML or not a mapping.
    """
    label = source_path or "<string>"
    try:
        data = YAMLProcessor().load_yaml(text)
    except yaml.YAMLError as e:
        raise TopologyFileError(f"Topology '{label}' is not valid YAML: {e}") from e

    if data is None:
        data = {}
    if not is_record(data):
        raise TopologyFileError(f"Topology '{label}' must be a mapping at the top level")
    return Topology(data, source_path=source_path)


def load_topology_file(path: str) -> Topology:
    """
    Load a containerlab topology file (``.clab.yml`` or JSON).

    Parameters
    ----------
    path : str
        Path to the topology file.

    Returns
    -------
    Topology
        A populated Topology object.

    Raises
    ------
    TopologyFileError
        If the file does not exist or cannot be parsed.
    """
    logger.info(f"Parsing topology file '{path}'")
    if not os.path.isfile(path):
        logger.critical(f"Topology file '{path}' does not exist!")
        raise TopologyFileError(f"Topology file '{path}' does not exist!")

    try:
        with open(path) as f:
            text = f.read()
    except OSError as e:
        logger.critical(f"Failed to read topology file '{path}': {e}")
        raise TopologyFileError(f"Failed to read topology file '{path}': {e}") from e

    if path.endswith(".json"):
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            logger.critical(f"File '{path}' is not valid JSON.")
            raise TopologyFileError(f"File '{path}' is not valid JSON.") from e
        if not is_record(data):
            raise TopologyFileError(f"Topology '{path}' must be a mapping at the top level")
        return Topology(data, source_path=path)

    return parse_topology_document(text, source_path=path)
