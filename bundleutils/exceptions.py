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

"""Exception hierarchy for bundleutils.

This module defines a custom exception hierarchy that allows library users
to distinguish between different types of errors. All exceptions inherit from
BundleUtilsError, allowing users to catch all bundleutils errors with a single
except clause if needed.

Several exceptions also inherit from the builtin they stand for, so callers
that already handle ``ModuleNotFoundError`` or ``TypeError`` keep working:

- ConfigNotFoundError, ModuleLoadError: ModuleNotFoundError
- ExportNotFoundError, MergeTypeError: TypeError

Example:
    Catching specific error types:
        ```python
        from bundleutils import load_config
        from bundleutils.exceptions import ConfigNotFoundError, ExportNotFoundError

        try:
            config = load_config(".build", "backend", "production")
        except ConfigNotFoundError as e:
            print(f"Missing configuration: {e}")
        except ExportNotFoundError as e:
            print(f"Bad variant: {e}")
        ```

    Catching all bundleutils errors:
        ```python
        from bundleutils.exceptions import BundleUtilsError

        try:
            deps = externals()
        except BundleUtilsError as e:
            print(f"bundleutils error: {e}")
        ```
"""

from __future__ import annotations

__all__ = [
    "BundleUtilsError",
    "ConfigError",
    "ConfigNotFoundError",
    "ExportNotFoundError",
    "MergeTypeError",
    "ExtendsCycleError",
    "ManifestError",
    "ModuleLoadError",
]


class BundleUtilsError(Exception):
    """Base exception for all bundleutils errors.

    All bundleutils-specific exceptions inherit from this class, allowing
    users to catch all bundleutils errors with a single except clause if
    needed.
    """

    pass


class ConfigError(BundleUtilsError):
    """Raised for configuration-related errors.

    This exception is raised when there are problems with:

    - YAML parse errors in configuration files (syntax errors, empty files)
    - Configuration functions that cannot be found or called
    - Configuration values that cannot be merged
    - Broken `extends` chains
    - Malformed dependency manifests

    Example:
        Catching configuration errors:
            ```python
            from bundleutils.exceptions import ConfigError

            try:
                config = load_config(".build", "frontend", "development")
            except ConfigError as e:
                print(f"Config error: {e}")
            ```
    """

    pass


class ConfigNotFoundError(ConfigError, ModuleNotFoundError):
    """Raised when no file exists for a configuration name.

    The message lists every candidate file that was tried.
    """

    pass


class ExportNotFoundError(ConfigError, TypeError):
    """Raised when a configuration file lacks the function to call.

    This covers a missing default ``config`` callable, a missing variant
    function, an export that is not callable, and variants requested from
    static YAML configuration files.
    """

    pass


class MergeTypeError(ConfigError, TypeError):
    """Raised when a configuration value is not a mapping.

    Configuration functions must return a dict; anything else cannot take
    part in `extends` merging.
    """

    pass


class ExtendsCycleError(ConfigError):
    """Raised when an `extends` chain refers back to a configuration already
    being loaded.
    """

    pass


class ManifestError(ConfigError):
    """Raised when the dependency manifest cannot be parsed or is not a
    JSON object.
    """

    pass


class ModuleLoadError(BundleUtilsError, ModuleNotFoundError):
    """Raised when a module or data file cannot be found under the project
    root.

    Example:
        Catching a missing module:
            ```python
            from bundleutils.exceptions import ModuleLoadError
            from bundleutils.io import load_module

            try:
                settings = load_module("settings/local")
            except ModuleLoadError as e:
                print(f"Not found: {e}")
            ```
    """

    pass
