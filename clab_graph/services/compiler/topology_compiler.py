# clab_graph/services/compiler/topology_compiler.py

import logging
from dataclasses import dataclass, field

from clab_graph.models.annotations import (
    TopologyAnnotations,
    load_annotations_file,
)
from clab_graph.models.container import ContainerDataProvider
from clab_graph.models.elements import EdgeElement, NodeElement
from clab_graph.models.migrations import GraphLabelMigration, InterfacePatternMigration
from clab_graph.models.topology import (
    Topology,
    load_topology_file,
    parse_topology_document,
)
from clab_graph.services.aliases.alias_node_handler import AliasNodeHandler
from clab_graph.services.edges.edge_element_builder import EdgeElementBuilder
from clab_graph.services.links.link_normalizer import CompileContext, normalize_links
from clab_graph.services.migration.graph_label_migrator import GraphLabelMigrator
from clab_graph.services.migration.interface_pattern_resolver import (
    InterfacePatternResolver,
)
from clab_graph.services.nodes.node_element_builder import NodeElementBuilder
from clab_graph.services.special.special_node_collector import (
    SpecialNodeCollector,
    materialize_special_nodes,
)
from clab_graph.utils.constants import SUBSTEP_INDENT

logger = logging.getLogger(__name__)


@dataclass
class CompileResult:
    """Everything one compile run produces."""

    elements: list[NodeElement | EdgeElement] = field(default_factory=list)
    lab_name: str = ""
    prefix: str = ""
    is_preset_layout: bool = False
    pending_migrations: list[InterfacePatternMigration] = field(default_factory=list)
    graph_label_migrations: list[GraphLabelMigration] = field(default_factory=list)

    @property
    def nodes(self) -> list[NodeElement]:
        return [e for e in self.elements if isinstance(e, NodeElement)]

    @property
    def edges(self) -> list[EdgeElement]:
        return [e for e in self.elements if isinstance(e, EdgeElement)]

    def find(self, element_id: str) -> NodeElement | EdgeElement | None:
        for element in self.elements:
            if element.id == element_id:
                return element
        return None

    def to_dict(self) -> dict:
        return {
            "elements": [e.to_dict() for e in self.elements],
            "labName": self.lab_name,
            "prefix": self.prefix,
            "isPresetLayout": self.is_preset_layout,
            "pendingMigrations": [m.to_dict() for m in self.pending_migrations],
            "graphLabelMigrations": [m.to_dict() for m in self.graph_label_migrations],
        }


def is_preset_layout(topology: Topology, annotations: TopologyAnnotations | None) -> bool:
    """True iff every declared node has an annotated position."""
    if not topology.has_nodes_section():
        return False
    index = annotations.node_annotation_index() if annotations else {}
    for node_id in topology.nodes:
        ann = index.get(node_id)
        if ann is None or ann.position is None:
            return False
    return True


class TopologyCompiler:
    """
    Compiles a containerlab topology into graph elements.

    The compiler is stateless between calls: every counter and cache lives
    in objects created by :meth:`compile`, so one instance may be shared.

    Parameters
    ----------
    provider : ContainerDataProvider, optional
        Runtime container data. Without it the graph is built in editor
        mode: no container state, no link state classes.
    log : logging.Logger, optional
        Logger for progress and diagnostics; the module logger by default.
    """

    def __init__(
        self,
        provider: ContainerDataProvider | None = None,
        log: logging.Logger | None = None,
    ):
        self.provider = provider
        self.log = log or logger

    def compile(
        self,
        topology: Topology,
        annotations: TopologyAnnotations | None = None,
        lab_name: str | None = None,
    ) -> CompileResult:
        """
        Run the full pipeline on one topology.

        Parameters
        ----------
        topology : Topology
            The parsed topology; never modified.
        annotations : TopologyAnnotations, optional
            The annotation sidecar; never modified.
        lab_name : str, optional
            Overrides the topology's ``name`` for container lookups.

        Returns
        -------
        CompileResult
            Elements in order (declared nodes, special nodes, edges, alias
            nodes) plus migration records.
        """
        lab = topology.get_lab_name(lab_name)
        prefix = topology.get_full_prefix(lab)
        result = CompileResult(lab_name=lab, prefix=prefix)

        if topology.has_nodes_section():
            migrator = GraphLabelMigrator(topology, self.log)
            migrations = migrator.detect(annotations)
            if migrations:
                result.graph_label_migrations = migrations
                annotations = migrator.apply(annotations, migrations)

        if not topology.has_topology():
            self.log.warning("Parsed YAML does not contain 'topology' object.")
            return result

        result.is_preset_layout = is_preset_layout(topology, annotations)
        self.log.info(f"Preset layout status: {result.is_preset_layout}")

        ctx = CompileContext()
        links = normalize_links(topology, ctx, self.log)

        pattern_resolver = InterfacePatternResolver(log=self.log)
        node_builder = NodeElementBuilder(
            topology,
            prefix,
            lab,
            annotations=annotations,
            provider=self.provider,
            pattern_resolver=pattern_resolver,
            log=self.log,
        )
        nodes = node_builder.build_all()
        result.pending_migrations = list(pattern_resolver.migrations)

        collector = SpecialNodeCollector(topology, self.log)
        collector.collect(links)
        special_nodes = materialize_special_nodes(
            collector, annotations, {node.id for node in nodes}
        )

        edge_builder = EdgeElementBuilder(
            topology, prefix, lab, collector, provider=self.provider, log=self.log
        )
        edges = edge_builder.build_all(links)

        alias_handler = AliasNodeHandler(topology, annotations, self.log)
        alias_nodes = alias_handler.materialize()
        rewired = alias_handler.rewire(edges)
        all_nodes = nodes + special_nodes + alias_nodes
        alias_handler.hide_base_bridges(all_nodes, edges)
        if alias_nodes:
            self.log.debug(
                f"{SUBSTEP_INDENT}Added {len(alias_nodes)} alias node(s), "
                f"rewired {rewired} edge(s)"
            )

        result.elements = [*nodes, *special_nodes, *edges, *alias_nodes]
        self.log.info(
            f"Transformed YAML to graph elements. Total elements: {len(result.elements)}"
        )
        return result

    def compile_text(
        self,
        text: str,
        annotations: TopologyAnnotations | None = None,
        lab_name: str | None = None,
    ) -> CompileResult:
        """Parse topology YAML text and compile it."""
        return self.compile(parse_topology_document(text), annotations, lab_name)

    def compile_file(
        self,
        topology_path: str,
        annotations_path: str | None = None,
        lab_name: str | None = None,
    ) -> CompileResult:
        """
        Load a topology file (and optional sidecar) and compile it.

        Raises
        ------
        TopologyFileError
            If the topology cannot be read.
        AnnotationsFileError
            If the sidecar cannot be read.
        """
        topology = load_topology_file(topology_path)
        annotations = load_annotations_file(annotations_path) if annotations_path else None
        return self.compile(topology, annotations, lab_name)


def compile_topology(
    topology: Topology,
    annotations: TopologyAnnotations | None = None,
    provider: ContainerDataProvider | None = None,
    lab_name: str | None = None,
) -> CompileResult:
    """Shorthand for ``TopologyCompiler(provider).compile(...)``."""
    return TopologyCompiler(provider).compile(topology, annotations, lab_name)
