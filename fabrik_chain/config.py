"""Loading solver parameters from YAML files.

Both a flat mapping and the ROS 2 parameter layout are accepted::

    tolerance: 0.01
    max_iterations: 50

    fabrik_chain:
      ros__parameters:
        tolerance: 0.01
        max_iterations: -1   # unbounded
"""

import logging
from dataclasses import fields
from typing import Any, Dict, Mapping

import yaml

from .common.errors import ChainConfigurationError
from .solvers import SolveConfig

logger = logging.getLogger(__name__)

_FIELDS = {f.name for f in fields(SolveConfig)}


def _unwrap_ros_parameters(data: Mapping[str, Any]) -> Mapping[str, Any]:
    """Return the inner mapping of a `<node>: ros__parameters:` document."""
    if len(data) == 1:
        (node_name, inner), = data.items()
        if isinstance(inner, Mapping) and "ros__parameters" in inner:
            logger.debug("Reading ros__parameters of node '%s'.", node_name)
            return inner["ros__parameters"] or {}
    return data


def config_from_dict(data: Mapping[str, Any]) -> SolveConfig:
    """
    Build a SolveConfig from a parameter mapping.

    Args:
        data: Mapping with any of tolerance, max_iterations, lengths,
            stall_threshold. A negative max_iterations means unbounded.

    Returns:
        Validated SolveConfig.

    Raises:
        ChainConfigurationError: On unknown keys or invalid values.
    """
    if not isinstance(data, Mapping):
        raise ChainConfigurationError(
            f"Solver parameters must be a mapping, got {type(data).__name__}."
        )

    params: Dict[str, Any] = dict(_unwrap_ros_parameters(data))
    unknown = sorted(set(params) - _FIELDS)
    if unknown:
        raise ChainConfigurationError(f"Unknown solver parameters: {unknown}")

    max_iter = params.get("max_iterations")
    if isinstance(max_iter, int) and not isinstance(max_iter, bool) and max_iter < 0:
        params["max_iterations"] = None

    config = SolveConfig(**params)
    config.validate()
    return config


def load_config(path: str) -> SolveConfig:
    """Read a YAML parameter file into a SolveConfig."""
    with open(path, "r") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ChainConfigurationError(f"Invalid YAML in {path}: {exc}") from exc

    if data is None:
        data = {}
    config = config_from_dict(data)
    logger.debug("Loaded solver config from %s: %s", path, config)
    return config
