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

"""bundleutils - helpers for bundling server applications

A small library used from a bundler configuration file to make multi-target
builds of server applications easier to manage.

bundleutils provides:

- Configuration files per target and type, with variants and extends
- Bundler externals generated from package.json
- Module loading and file reading relative to the project root
- A Runner plugin that restarts the built program after every rebuild

Quick Start:
Pick a configuration from the environment:

    from bundleutils import load_config

    config = load_config(".build", os.environ["TARGET"], os.environ["BUILD_ENV"])

Keep server dependencies out of the bundle:

    config["externals"] = externals()

For more details, see the individual module docstrings.
"""

__version__ = "0.1.0"
__author__ = "Roger Cibrian"
__license__ = "Apache-2.0"
__description__ = "Helpers for bundling server applications"

# Re-export commonly used functions for convenience
from bundleutils.build import Asset, Compilation, Runner
from bundleutils.config import load_config, merge_configs
from bundleutils.exceptions import (
    BundleUtilsError,
    ConfigError,
    ConfigNotFoundError,
    ExportNotFoundError,
    ExtendsCycleError,
    ManifestError,
    MergeTypeError,
    ModuleLoadError,
)
from bundleutils.externals import externals, load_manifest
from bundleutils.io import load_module, read_file
from bundleutils.paths import get_root_path, set_root_path

__all__ = [
    "__version__",
    "__author__",
    "__license__",
    "__description__",
    "load_config",
    "merge_configs",
    "externals",
    "load_manifest",
    "load_module",
    "read_file",
    "get_root_path",
    "set_root_path",
    "Runner",
    "Asset",
    "Compilation",
    "BundleUtilsError",
    "ConfigError",
    "ConfigNotFoundError",
    "ExportNotFoundError",
    "ExtendsCycleError",
    "ManifestError",
    "MergeTypeError",
    "ModuleLoadError",
]
