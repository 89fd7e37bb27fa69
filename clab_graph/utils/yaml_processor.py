# clab_graph/utils/yaml_processor.py

import logging
from numbers import Number

import yaml

from clab_graph.utils.constants import SUBSTEP_INDENT

logger = logging.getLogger(__name__)

# Small all-numeric mappings (positions, rates) are written on one line
FLOW_MAPPING_MAX_KEYS = 2


class GraphDumper(yaml.SafeDumper):
    """
    Dumper for compiled graphs.

    Elements often share the same label or position dicts; anchors and
    aliases are never emitted so every element reads on its own.
    """

    def ignore_aliases(self, data):
        return True


def represent_graph_mapping(dumper, data):
    compact = (
        0 < len(data) <= FLOW_MAPPING_MAX_KEYS
        and all(isinstance(v, Number) and not isinstance(v, bool) for v in data.values())
    )
    return dumper.represent_mapping(
        "tag:yaml.org,2002:map", data, flow_style=compact
    )


GraphDumper.add_representer(dict, represent_graph_mapping)


class YAMLProcessor:
    def load_yaml(self, yaml_str):
        try:
            return yaml.safe_load(yaml_str)
        except yaml.YAMLError as e:
            logger.error(f"Error loading YAML: {e!s}")
            raise

    def dump_yaml(self, data) -> str:
        return yaml.dump(
            data,
            Dumper=GraphDumper,
            sort_keys=False,
            default_flow_style=False,
            indent=2,
        )

    def save_yaml(self, data, output_file):
        try:
            with open(output_file, "w") as file:
                file.write(self.dump_yaml(data))
        except OSError as e:
            logger.error(f"Error saving YAML file: {e!s}")
            raise
        logger.info(f"{SUBSTEP_INDENT}YAML file saved as '{output_file}'.")
