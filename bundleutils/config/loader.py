# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Configuration loading and merging for bundleutils.

Bundler configurations are kept in one directory, one file per target and
type, and picked at build time:

    .build/
        frontend.development.py
        frontend.production.py
        backend.development.py
        backend.production.py
        base.production.yaml

A single entry point can then choose the file from the environment:

    config = load_config(".build", os.environ["TARGET"], os.environ["BUILD_ENV"])

Configuration Files:
    1. **Python modules** ({name}.py)
       - Must define a module-level callable named ``config``
       - May define other callables ("variants"), selected by name
       - Each callable receives the parameter bag and returns a dict

    2. **YAML files** ({name}.yaml or {name}.yml)
       - Static mappings, no variants
       - ``${key}`` placeholders in strings are replaced with parameter values

    Python modules win when several candidates exist.

Parameter Bag:
    Every configuration callable receives a dict holding:

    - hash: Epoch milliseconds when use_hash is True, else ""
    - hashStr: ".{hash}" when use_hash is True, else ""
    - Every caller parameter (these override hash/hashStr)

Inheritance:
    A configuration that returns an ``extends`` key names a sibling
    configuration (a name like "base.production", not a filename). The key is
    removed, the sibling is loaded with the same parameter bag and no variant,
    and the child is merged on top of it (see bundleutils.config.merge).
    Chains may be any depth; a chain that loops raises ExtendsCycleError.

Error Handling:
    - ConfigNotFoundError: No file exists for a configuration name
    - ExportNotFoundError: The config/variant callable is missing
    - MergeTypeError: A configuration is not a dict
    - ExtendsCycleError: An extends chain loops
    - ConfigError: YAML parse errors or empty YAML files
    - All errors are chained with "from err" for better debugging

Example:
    Basic usage:
        ```python
        from bundleutils.config import load_config

        cfg = load_config(".build", "backend", "production", use_hash=True)
        print(cfg["output"]["filename"])  # Output: server.1712345678901.js
        ```

    Use a variant and custom parameters:
        ```python
        cfg = load_config(
            ".build", "backend", "production",
            params={"port": 8080},
            variant="library",
        )
        ```
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
import re
import time
from typing import Any

import yaml

from bundleutils.config.merge import merge_configs
from bundleutils.exceptions import (
    ConfigError,
    ConfigNotFoundError,
    ExportNotFoundError,
    ExtendsCycleError,
    MergeTypeError,
)
from bundleutils.io import load_module
from bundleutils.logging import Logger, get_global_logger, get_logger
from bundleutils.paths import resolve_path

DEFAULT_EXPORT = "config"
EXTENDS_KEY = "extends"
CONFIG_SUFFIXES = (".py", ".yaml", ".yml")

_PLACEHOLDER = re.compile(r"\$\{(\w+)\}")

# -------------------------------
# Data types
# -------------------------------


@dataclass(frozen=True)
class ConfigDescriptor:
    """Identifies one configuration to load.

    Attributes:
        directory: Directory holding the configuration files, relative to
            the project root.
        name: Configuration name, "{target}.{type}" or an extends target.
        variant: Name of the callable to use instead of ``config``.
    """

    directory: str
    name: str
    variant: str | None = None

    @property
    def candidates(self) -> list[Path]:
        """Files tried for this configuration, in priority order."""
        return [Path(self.directory) / f"{self.name}{ext}" for ext in CONFIG_SUFFIXES]

    @property
    def label(self) -> str:
        """Name as shown in messages, with the variant when one is used."""
        return f"{self.name}:{self.variant}" if self.variant else self.name


# -------------------------------
# Parameters
# -------------------------------


def build_params(use_hash: bool = False, params: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Build the parameter bag sent to configuration callables.

    Args:
        use_hash: If True, generate a millisecond timestamp hash.
        params: Caller parameters. They override hash and hashStr.

    Returns:
        A new dict with hash, hashStr and every caller parameter.
    """
    hash_value: int | str = int(time.time() * 1000) if use_hash else ""
    bag: dict[str, Any] = {
        "hash": hash_value,
        "hashStr": f".{hash_value}" if use_hash else "",
    }
    bag.update(params or {})
    return bag


# -------------------------------
# File helpers
# -------------------------------


def _find_config_file(descriptor: ConfigDescriptor) -> Path:
    """Return the first existing candidate, relative to the project root."""
    for candidate in descriptor.candidates:
        if resolve_path(candidate).is_file():
            return candidate
    tried = ", ".join(str(c) for c in descriptor.candidates)
    raise ConfigNotFoundError(
        f"Configuration '{descriptor.name}' not found in {descriptor.directory} "
        f"(tried: {tried})",
        name=descriptor.name,
    )


def _call_config_module(
    config_file: Path, descriptor: ConfigDescriptor, params: dict[str, Any]
) -> Any:
    module = load_module(config_file)
    export = descriptor.variant or DEFAULT_EXPORT
    fn = getattr(module, export, None)
    if fn is None:
        raise ExportNotFoundError(f"{config_file} has no '{export}' function")
    if not callable(fn):
        raise ExportNotFoundError(
            f"{config_file}: '{export}' is {type(fn).__name__}, not a function"
        )
    return fn(params)


def _substitute(value: Any, params: Mapping[str, Any]) -> Any:
    """Replace ${key} placeholders found in strings, recursively.

    A string that is exactly one placeholder takes the raw parameter value,
    so numeric parameters stay numeric. Unknown keys are left untouched.
    """
    if isinstance(value, str):
        whole = _PLACEHOLDER.fullmatch(value)
        if whole and whole.group(1) in params:
            return params[whole.group(1)]
        return _PLACEHOLDER.sub(
            lambda m: str(params[m.group(1)]) if m.group(1) in params else m.group(0),
            value,
        )
    if isinstance(value, dict):
        return {k: _substitute(v, params) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute(v, params) for v in value]
    return value


def _load_yaml_config(
    config_file: Path, descriptor: ConfigDescriptor, params: dict[str, Any]
) -> Any:
    if descriptor.variant:
        raise ExportNotFoundError(
            f"{config_file} is a YAML file; variant '{descriptor.variant}' "
            "requires a Python configuration module"
        )
    path = resolve_path(config_file)
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as err:
        raise ConfigError(f"Error parsing YAML: {path}: {err}") from err
    if data is None:
        raise ConfigError(f"YAML file is empty: {path}")
    return _substitute(data, params)


# -------------------------------
# Verbose helpers
# -------------------------------


def _dump_config(data: Mapping[str, Any], logger: Logger) -> None:
    """Print a configuration as YAML for debug mode."""
    try:
        yaml_str = yaml.dump(dict(data), default_flow_style=False, sort_keys=False)
    except (yaml.YAMLError, TypeError) as err:
        logger.debug("CONFIG", f"(not representable as YAML: {err})")
        return
    for line in yaml_str.split("\n"):
        if line.strip():
            logger.debug("CONFIG", "  " + line)


# -------------------------------
# Loading
# -------------------------------


def _load_config(
    descriptor: ConfigDescriptor,
    params: dict[str, Any],
    logger: Logger,
    chain: tuple[ConfigDescriptor, ...] = (),
) -> dict[str, Any]:
    """Load one configuration and, recursively, the one it extends.

    'chain' holds the descriptors already being loaded. A variant may extend
    the default callable of its own file, so a name and a variant together
    identify a step.
    """
    if descriptor in chain:
        loop = " -> ".join(d.label for d in chain + (descriptor,))
        raise ExtendsCycleError(f"Circular extends in {descriptor.directory}: {loop}")

    config_file = _find_config_file(descriptor)
    logger.verbose("CONFIG", f"Loading: {config_file}")

    if config_file.suffix == ".py":
        config = _call_config_module(config_file, descriptor, params)
    else:
        config = _load_yaml_config(config_file, descriptor, params)

    if not isinstance(config, Mapping):
        raise MergeTypeError(
            f"{config_file} returned {type(config).__name__}, expected a dict"
        )

    if EXTENDS_KEY not in config:
        return config

    config = dict(config)
    parent_name = config.pop(EXTENDS_KEY)
    if not isinstance(parent_name, str) or not parent_name:
        raise ConfigError(
            f"{config_file}: '{EXTENDS_KEY}' must be a configuration name, "
            f"got {parent_name!r}"
        )

    logger.verbose("CONFIG", f"{descriptor.label} extends {parent_name}")
    parent = _load_config(
        ConfigDescriptor(descriptor.directory, parent_name),
        params,
        logger,
        chain + (descriptor,),
    )
    return merge_configs(parent, config)


# -------------------------------
# Public API
# -------------------------------


def load_config(
    directory: str,
    target: str,
    config_type: str,
    use_hash: bool = False,
    params: Mapping[str, Any] | None = None,
    variant: str | None = None,
    *,
    verbose: bool = False,
    debug: bool = False,
    logger: Logger | None = None,
) -> dict[str, Any]:
    """Load a bundler configuration by target and type.

    Steps
      1) Build the parameter bag (hash, hashStr, caller params).
      2) Find {directory}/{target}.{config_type}.py (or .yaml/.yml) under the
         project root.
      3) Call ``config`` (or the 'variant' callable) with the bag, or read the
         YAML file and fill in its placeholders.
      4) If the result has 'extends', load that sibling with the same bag and
         merge the result on top of it.

    Args:
        directory: Directory of the configuration files, relative to the
            project root.
        target: Configuration target (e.g., "frontend", "backend").
        config_type: Configuration type or environment
            (e.g., "development", "production").
        use_hash: If True, send a millisecond timestamp as 'hash' and
            '.{hash}' as 'hashStr'. Default is False.
        params: Extra parameters sent to every configuration callable.
        variant: Name of a callable to use instead of ``config``.
        verbose: Show loading progress. Ignored when 'logger' is given.
        debug: Dump the final configuration. Ignored when 'logger' is given.
        logger: Logger to use. Default is the global logger, or a printing
            logger when verbose/debug is set.

    Returns:
        The configuration dict.

    Raises:
        ConfigNotFoundError: If a configuration file does not exist.
        ExportNotFoundError: If the config/variant callable is missing.
        MergeTypeError: If a configuration is not a dict.
        ExtendsCycleError: If an extends chain loops.
        ConfigError: If a YAML file cannot be parsed.

    Example:
        ```python
        cfg = load_config(".build", "frontend", "development")
        ```
    """
    if logger is None:
        logger = get_logger(verbose, debug) if verbose or debug else get_global_logger()

    bag = build_params(use_hash, params)
    descriptor = ConfigDescriptor(directory, f"{target}.{config_type}", variant or None)
    config = _load_config(descriptor, bag, logger)

    if debug:
        logger.debug("CONFIG", "--- Final Configuration ---")
        _dump_config(config, logger)

    return config
