"""Configuration utilities.

Edge calculators are configured with Hydra: YAML files in the `navgraph.configs` package describe the objects to
instantiate, and command-line style overrides adjust individual thresholds, e.g.
`EdgeCalculator.settings.turn_max_distance=20`.
"""

from typing import Optional, Sequence

import hydra
from hydra.utils import instantiate
from omegaconf import DictConfig, OmegaConf

import navgraph.utils.logger as logger_utils
from navgraph.edge.edge_calculator import EdgeCalculator
from navgraph.utils.spatial import deg_to_rad

logger = logger_utils.get_logger()

CONFIG_MODULE = "navgraph.configs"
DEFAULT_CONFIG_NAME = "edge_calculator"

# Angular thresholds are written in degrees in the YAML files.
OmegaConf.register_new_resolver("deg2rad", deg_to_rad, replace=True)


def compose_config(config_name: str = DEFAULT_CONFIG_NAME, overrides: Optional[Sequence[str]] = None) -> DictConfig:
    """Compose a config from the `navgraph.configs` package.

    Args:
        config_name: name of the YAML file, without extension.
        overrides: Hydra override strings.

    Returns:
        The composed, unresolved config.
    """
    with hydra.initialize_config_module(config_module=CONFIG_MODULE, version_base=None):
        return hydra.compose(config_name=config_name, overrides=list(overrides or []))


def load_edge_calculator(
    config_name: str = DEFAULT_CONFIG_NAME, overrides: Optional[Sequence[str]] = None
) -> EdgeCalculator:
    """Instantiate the edge calculator described by a config, logging the effective thresholds."""
    cfg = compose_config(config_name, overrides)
    log_configuration_summary(cfg)

    edge_calculator: EdgeCalculator = instantiate(cfg.EdgeCalculator)
    return edge_calculator


def _log_divider() -> None:
    logger.info("=" * 80)


def log_configuration_summary(cfg: DictConfig) -> None:
    """Log a concise, user-friendly configuration summary."""
    _log_divider()
    logger.info("EDGE CALCULATOR CONFIGURATION SUMMARY")
    _log_divider()
    for line in format_config_section(cfg.EdgeCalculator, "EdgeCalculator").splitlines():
        logger.info(line)
    _log_divider()


def format_config_section(cfg_section: DictConfig, section_name: str, indent: int = 0) -> str:
    """Format a configuration section for human-readable display."""
    indent_str = "  " * indent

    if "_target_" in cfg_section:
        class_name = cfg_section["_target_"].split(".")[-1]
        lines = [f"{indent_str}{section_name}: {class_name}"]
    else:
        lines = [f"{indent_str}{section_name}"]

    for key, value in cfg_section.items():
        if key.startswith("_"):
            continue

        if OmegaConf.is_config(value):
            lines.append(format_config_section(value, key, indent + 1))
        else:
            lines.append(f"{indent_str}  - {key}: {value}")

    return "\n".join(lines)
