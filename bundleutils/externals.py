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

"""External dependency lists for bundled server applications.

By default a bundler inlines every required module into the bundle, but many
server-side packages cannot work that way and must stay ``commonjs``
externals, resolved at run time. This module reads the project manifest
(package.json) and declares the production dependencies as externals, with
options for extra modules, ignored packages and development dependencies.

Resolution Rules:
    1. Walk defaults + dependencies (+ devDependencies when include_dev)
    2. Skip every name listed in 'ignore'
    3. Map each remaining name to "commonjs <name>"
    4. Map each extras entry to "commonjs <path>", ignoring 'ignore' and
       overwriting anything set before

Example:
    ```python
    from bundleutils import externals

    externals()                                   # production dependencies
    externals({"my-mod": "./lib/my-mod.js"})      # plus a custom module
    externals({}, True)                           # plus devDependencies
    externals({}, False, ["colors/safe"])         # custom defaults
    externals({}, False, None, ["node-fetch"])    # custom ignore list
    ```
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
import json
from typing import Any

from bundleutils.exceptions import ManifestError
from bundleutils.io import load_module
from bundleutils.logging import Logger, get_global_logger

MANIFEST_FILE = "package.json"

# Always declared as externals unless the caller passes its own list
DEFAULT_EXTERNALS: tuple[str, ...] = (
    "bundleutils",
    "colors/safe",
)

# Front-end packages that break when required at run time
DEFAULT_IGNORE: tuple[str, ...] = (
    "normalize.css",
    "font-awesome",
    "react-tap-event-plugin",
)


def load_manifest(relative_path: str = MANIFEST_FILE) -> dict[str, Any]:
    """Load the dependency manifest from the project root.

    Args:
        relative_path: Manifest path relative to the project root.
            Default is "package.json".

    Returns:
        The parsed manifest.

    Raises:
        ModuleLoadError: If the manifest does not exist.
        ManifestError: If the manifest is not valid JSON or not an object.
    """
    try:
        manifest = load_module(relative_path)
    except json.JSONDecodeError as err:
        raise ManifestError(f"Invalid JSON in manifest {relative_path}: {err}") from err

    if not isinstance(manifest, dict):
        raise ManifestError(
            f"Manifest {relative_path} must be a JSON object, "
            f"got {type(manifest).__name__}"
        )
    return manifest


def _dependency_names(manifest: Mapping[str, Any], key: str) -> list[str]:
    deps = manifest.get(key) or {}
    if not isinstance(deps, Mapping):
        raise ManifestError(f"Manifest field '{key}' must be an object")
    return list(deps.keys())


def externals(
    extras: Mapping[str, str] | None = None,
    include_dev: bool = False,
    defaults: Iterable[str] | None = None,
    ignore: Iterable[str] | None = None,
    *,
    manifest: str = MANIFEST_FILE,
    logger: Logger | None = None,
) -> dict[str, str]:
    """Build the bundler externals map from the project manifest.

    Args:
        extras: Custom externals as {name: path}. Each one maps to
            "commonjs <path>", even if the name is ignored or already set.
        include_dev: If True, devDependencies are externals too.
            Default is False.
        defaults: Names declared as externals even if the manifest does not
            list them. Default is DEFAULT_EXTERNALS.
        ignore: Names never declared from defaults or the manifest.
            Default is DEFAULT_IGNORE.
        manifest: Manifest path relative to the project root.
        logger: Logger to use. Default is the global logger.

    Returns:
        Dict of {name: "commonjs <name-or-path>"}.

    Raises:
        ModuleLoadError: If the manifest does not exist.
        ManifestError: If the manifest is malformed.
    """
    if logger is None:
        logger = get_global_logger()

    package = load_manifest(manifest)
    names = list(DEFAULT_EXTERNALS if defaults is None else defaults)
    names += _dependency_names(package, "dependencies")
    if include_dev:
        names += _dependency_names(package, "devDependencies")

    ignored = set(DEFAULT_IGNORE if ignore is None else ignore)

    result: dict[str, str] = {}
    for name in names:
        if name in ignored:
            logger.debug("EXTERNALS", f"Ignoring: {name}")
            continue
        result[name] = f"commonjs {name}"

    for name, path in (extras or {}).items():
        result[name] = f"commonjs {path}"

    logger.verbose("EXTERNALS", f"Declared {len(result)} external(s)")
    return result
