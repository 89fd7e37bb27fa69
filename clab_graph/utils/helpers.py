# clab_graph/utils/helpers.py

import logging
import os

from jinja2 import Environment, FileSystemLoader, select_autoescape

from clab_graph.utils.constants import GRAPH_LABEL_KEYS

logger = logging.getLogger(__name__)

PACKAGE_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
TEMPLATE_DIR = os.path.join(PACKAGE_ROOT, "templates")

template_environment = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=select_autoescape(),
    trim_blocks=True,
    lstrip_blocks=True,
)


def render_template(template_name: str, data: dict) -> str:
    """
    Render a Jinja2 template by name, using a data dictionary.

    Parameters
    ----------
    template_name : str
        The name of the template file (e.g., "summary.j2").
    data : dict
        A dictionary of values to substitute into the template.

    Returns
    -------
    str
        The rendered template as a string.
    """
    template = template_environment.get_template(template_name)
    return template.render(data)


def is_record(value) -> bool:
    """Return True for mapping values (YAML objects)."""
    return isinstance(value, dict)


def to_str(value) -> str:
    """
    Convert a scalar YAML value to a string, mapping ``None`` to ``""``.

    Booleans are rendered the way YAML writes them so that values such as
    ``vni: true`` round-trip through an editor unchanged.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def as_trimmed_string(value) -> str:
    return value.strip() if isinstance(value, str) else ""


def parse_float(value) -> float:
    """
    Parse a numeric label value, falling back to 0.0.

    Parameters
    ----------
    value : any
        A string or number taken from a YAML label.

    Returns
    -------
    float
        The parsed value, or 0.0 when it cannot be parsed or is not finite.
    """
    if isinstance(value, bool):
        return 0.0
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return 0.0
    if parsed != parsed or parsed in (float("inf"), float("-inf")):
        return 0.0
    return parsed


def strip_graph_labels(labels) -> dict:
    """
    Return a copy of a labels map without the legacy ``graph-*`` keys.

    Parameters
    ----------
    labels : dict or None
        The merged labels of a node.

    Returns
    -------
    dict
        A new dictionary; the input is never modified.
    """
    if not is_record(labels):
        return {}
    return {k: v for k, v in labels.items() if k not in GRAPH_LABEL_KEYS}


def strip_cidr(address) -> str:
    """
    Remove a ``/len`` suffix from an address as printed by containerlab inspect.

    Values of ``N/A`` or empty are reported as ``""``.
    """
    if not isinstance(address, str):
        return ""
    address = address.strip()
    if not address or address.upper() == "N/A":
        return ""
    return address.split("/", 1)[0]
