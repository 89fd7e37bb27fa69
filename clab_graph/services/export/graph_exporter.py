# clab_graph/services/export/graph_exporter.py

import json
import logging
from enum import Enum

from clab_graph.services.compiler.topology_compiler import CompileResult
from clab_graph.utils.constants import SUBSTEP_INDENT
from clab_graph.utils.helpers import render_template
from clab_graph.utils.yaml_processor import YAMLProcessor

logger = logging.getLogger(__name__)


class OutputFormat(str, Enum):
    JSON = "json"
    YAML = "yaml"


def serialize_result(result: CompileResult, output_format: OutputFormat) -> str:
    data = result.to_dict()
    if output_format == OutputFormat.YAML:
        return YAMLProcessor().dump_yaml(data)
    return json.dumps(data, indent=2) + "\n"


def summary_context(result: CompileResult) -> dict:
    """Flatten a compile result into the values the summary template prints."""
    nodes = [
        {
            "id": node.id,
            "role": node.role,
            "kind": node.kind,
            "state": node.extra_data.state,
            "hidden": node.is_hidden(),
        }
        for node in result.nodes
    ]
    edges = [
        {
            "id": edge.id,
            "source": edge.source,
            "target": edge.target,
            "source_endpoint": edge.source_endpoint,
            "target_endpoint": edge.target_endpoint,
            "classes": edge.classes,
            "errors": edge.extra_data.validation_errors,
        }
        for edge in result.edges
    ]
    return {
        "lab_name": result.lab_name,
        "prefix": result.prefix,
        "preset_layout": result.is_preset_layout,
        "nodes": nodes,
        "edges": edges,
        "pending_migrations": result.pending_migrations,
        "graph_label_migrations": result.graph_label_migrations,
    }


def render_summary(result: CompileResult) -> str:
    return render_template("summary.j2", summary_context(result))


class GraphExporter:
    """
    Writes a compile result to a file or returns it as text.

    Parameters
    ----------
    result : CompileResult
        The compiled graph.
    output_format : OutputFormat
        ``json`` or ``yaml``.
    log : logging.Logger, optional
        A logger instance for output/diagnostics.
    """

    def __init__(
        self,
        result: CompileResult,
        output_format: OutputFormat = OutputFormat.JSON,
        log: logging.Logger | None = None,
    ):
        self.result = result
        self.output_format = OutputFormat(output_format)
        self.log = log or logger

    def dumps(self) -> str:
        return serialize_result(self.result, self.output_format)

    def write(self, output_file: str):
        """
        Write the serialized graph to ``output_file``.

        Raises
        ------
        OSError
            If the file cannot be written.
        """
        if self.output_format == OutputFormat.YAML:
            YAMLProcessor().save_yaml(self.result.to_dict(), output_file)
            return
        try:
            with open(output_file, "w") as f:
                f.write(self.dumps())
        except OSError as e:
            self.log.error(f"Error writing graph file '{output_file}': {e}")
            raise
        self.log.info(
            f"{SUBSTEP_INDENT}Graph with {len(self.result.elements)} element(s) "
            f"saved as '{output_file}'."
        )
