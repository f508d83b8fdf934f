"""
workgraph config package public API.

Loads ``workgraph.toml`` with ``WORKGRAPH_`` env overrides and fails fast with
structured validation/load errors.
"""

from workgraph.config.loader import (
    DEFAULT_CONFIG_FILE,
    ENV_PREFIX,
    ConfigLoadError,
    dump_effective_config,
    effective_config,
    env_variable_names,
    load_config,
)
from workgraph.config.schema import (
    DEFAULT_CONFIG,
    ConfigSchemaVersion,
    ConfigValidationError,
    ConfigValidationIssue,
    ConfigValidationResult,
    WorkGraphConfig,
    assert_valid_config,
    default_config,
    merge_config,
    validate_config,
)

__all__ = [
    "ConfigLoadError",
    "ConfigSchemaVersion",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "DEFAULT_CONFIG",
    "DEFAULT_CONFIG_FILE",
    "ENV_PREFIX",
    "WorkGraphConfig",
    "assert_valid_config",
    "default_config",
    "dump_effective_config",
    "effective_config",
    "env_variable_names",
    "load_config",
    "merge_config",
    "validate_config",
]
