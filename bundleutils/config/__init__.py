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

"""Configuration loading and management for bundleutils.

This module loads bundler configurations named by target and type from a
directory of Python modules or YAML files:

  - {directory}/{target}.{type}.py exposing config(params) and variants
  - {directory}/{target}.{type}.yaml with ${param} placeholders

A configuration may extend a sibling with an ``extends`` key. The loader
deep-merges the child on top of the parent: dicts are merged recursively,
lists are concatenated and scalars are replaced (last wins).

Public API:

- load_config: Load and merge configuration for a target and type
- merge_configs: Merge two configuration dicts

Example:
    Basic usage:

        from bundleutils.config import load_config

        config = load_config(".build", "backend", "production", use_hash=True)
        print(config["output"]["filename"])

"""

from .loader import load_config
from .merge import merge_configs

__all__ = ["load_config", "merge_configs"]
