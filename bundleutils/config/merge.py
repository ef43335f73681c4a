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

"""Merging of bundler configuration dicts.

Merge Behavior:
    The merge uses "overlay wins" semantics with list concatenation, which is
    what bundler configurations expect (a child adds rules and plugins to the
    ones its parent declares):

    - **Dicts**: Recursively merged (keys from overlay override base)
    - **Lists**: Concatenated, base items first
    - **Scalars**: Overwritten (strings, numbers, booleans, None)

Example:
    ```python
    from bundleutils.config.merge import merge_configs

    base = {"mode": "none", "plugins": ["a"], "output": {"path": "dist"}}
    child = {"mode": "production", "plugins": ["b"], "output": {"filename": "app.js"}}
    merge_configs(base, child)
    # {"mode": "production", "plugins": ["a", "b"],
    #  "output": {"path": "dist", "filename": "app.js"}}
    ```
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from bundleutils.exceptions import MergeTypeError


def _merge_values(base: Any, overlay: Any) -> Any:
    if isinstance(base, Mapping) and isinstance(overlay, Mapping):
        return _merge_mappings(base, overlay)
    if isinstance(base, list) and isinstance(overlay, list):
        return base + overlay
    return overlay


def _merge_mappings(base: Mapping[str, Any], overlay: Mapping[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = dict(base)
    for k, v in overlay.items():
        if k in result:
            result[k] = _merge_values(result[k], v)
        else:
            result[k] = v
    return result


def merge_configs(base: Any, overlay: Any) -> dict[str, Any]:
    """Deep-merge two configuration dicts with "overlay wins".

    Rules:
      - dict + dict -> deep merge
      - list + list -> concatenated (base + overlay)
      - everything else -> overlay overwrites base

    This function does not mutate inputs; returns a new dict.

    Raises:
        MergeTypeError: If either argument is not a mapping.
    """
    for label, value in (("base", base), ("overlay", overlay)):
        if not isinstance(value, Mapping):
            raise MergeTypeError(
                f"Cannot merge configurations: {label} is "
                f"{type(value).__name__}, expected a dict"
            )
    return _merge_mappings(base, overlay)
