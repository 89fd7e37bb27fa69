# clab_graph/utils/exceptions.py


class ClabGraphError(Exception):
    """
    Base exception for all clab-graph errors.
    """


class TopologyFileError(ClabGraphError):
    """Raised when a topology file is missing or cannot be parsed."""


class AnnotationsFileError(ClabGraphError):
    """Raised when an annotations sidecar file is missing or invalid."""


class ContainerDataError(ClabGraphError):
    """
    Raised when containerlab inspect data cannot be read or the
    containerlab command fails.
    """
