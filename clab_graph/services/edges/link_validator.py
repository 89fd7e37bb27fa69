# clab_graph/services/edges/link_validator.py

from clab_graph.models.link import is_endpoint_object
from clab_graph.utils.constants import (
    ERR_INVALID_ENDPOINT,
    ERR_INVALID_VETH_ENDPOINTS,
    ERR_MISSING_DST_PORT,
    ERR_MISSING_HOST_INTERFACE,
    ERR_MISSING_REMOTE,
    ERR_MISSING_VNI,
    HOST_INTERFACE_TYPES,
    LINK_TYPE_VETH,
    LINK_TYPE_VXLAN,
    LINK_TYPE_VXLAN_STITCH,
    SINGLE_ENDPOINT_TYPES,
)


def _complete_endpoint(endpoint) -> bool:
    return (
        is_endpoint_object(endpoint)
        and endpoint["node"] != ""
        and endpoint.get("interface") is not None
    )


def _is_blank(value) -> bool:
    return value is None or value == ""


def validate_veth_link(link: dict) -> list[str]:
    endpoints = link.get("endpoints")
    if not isinstance(endpoints, list) or len(endpoints) < 2:
        return [ERR_INVALID_VETH_ENDPOINTS]
    if _complete_endpoint(endpoints[0]) and _complete_endpoint(endpoints[1]):
        return []
    return [ERR_INVALID_VETH_ENDPOINTS]


def validate_special_link(link_type: str, link: dict) -> list[str]:
    errors = []
    if not _complete_endpoint(link.get("endpoint")):
        errors.append(ERR_INVALID_ENDPOINT)
    if link_type in HOST_INTERFACE_TYPES:
        host_interface = link.get("host-interface")
        if not isinstance(host_interface, str) or host_interface == "":
            errors.append(ERR_MISSING_HOST_INTERFACE)
    if link_type in (LINK_TYPE_VXLAN, LINK_TYPE_VXLAN_STITCH):
        remote = link.get("remote")
        if not isinstance(remote, str) or remote == "":
            errors.append(ERR_MISSING_REMOTE)
        if _is_blank(link.get("vni")):
            errors.append(ERR_MISSING_VNI)
        if _is_blank(link.get("dst-port")):
            errors.append(ERR_MISSING_DST_PORT)
    return errors


def validate_extended_link(link: dict) -> list[str]:
    """
    Check the required fields of an extended-format link.

    Short-format links (no ``type``) and unknown types are not checked.

    Parameters
    ----------
    link : dict
        The raw link mapping.

    Returns
    -------
    list[str]
        Error tags such as ``missing-vni``; empty when the link is valid.
    """
    link_type = link.get("type") if isinstance(link.get("type"), str) else ""
    if not link_type:
        return []
    if link_type == LINK_TYPE_VETH:
        return validate_veth_link(link)
    if link_type in SINGLE_ENDPOINT_TYPES:
        return validate_special_link(link_type, link)
    return []
