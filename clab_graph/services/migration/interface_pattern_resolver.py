# clab_graph/services/migration/interface_pattern_resolver.py

import logging
from dataclasses import dataclass

from clab_graph.models.annotations import NodeAnnotation
from clab_graph.models.migrations import InterfacePatternMigration
from clab_graph.utils.constants import DEFAULT_INTERFACE_PATTERNS

logger = logging.getLogger(__name__)


@dataclass
class InterfacePatternResult:
    pattern: str | None
    needs_migration: bool = False


class InterfacePatternResolver:
    """
    Chooses the interface naming pattern shown for a node.

    A pattern stored on the node annotation wins. Otherwise the built-in
    default for the node's kind is used and reported as a migration, so the
    caller can persist it into the annotation file.

    Parameters
    ----------
    defaults : dict, optional
        Kind to pattern mapping; the built-in table when omitted.
    log : logging.Logger, optional
        Logger for migration notices; the module logger when omitted.
    """

    def __init__(
        self,
        defaults: dict[str, str] | None = None,
        log: logging.Logger | None = None,
    ):
        self.log = log or logger
        self.defaults = dict(DEFAULT_INTERFACE_PATTERNS if defaults is None else defaults)
        self.migrations: list[InterfacePatternMigration] = []

    def resolve(self, kind: str, annotation: NodeAnnotation | None) -> InterfacePatternResult:
        if annotation is not None and annotation.interface_pattern:
            return InterfacePatternResult(annotation.interface_pattern)
        pattern = self.defaults.get(kind or "")
        return InterfacePatternResult(pattern, needs_migration=bool(pattern))

    def resolve_for_node(
        self, node_id: str, kind: str, annotation: NodeAnnotation | None
    ) -> str | None:
        """Resolve a node's pattern, recording a migration for kind defaults."""
        result = self.resolve(kind, annotation)
        if result.needs_migration and result.pattern:
            self.migrations.append(InterfacePatternMigration(node_id, result.pattern))
            self.log.debug(
                f"Node '{node_id}' uses kind default interface pattern {result.pattern}"
            )
        return result.pattern
