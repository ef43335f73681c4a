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

"""Project root handling for bundleutils.

Every path the library reads (configuration files, the manifest, dynamic
modules) is relative to a single project root, not to the location of the
calling module. This is what lets a bundled build find files without knowing
where the bundle ended up.

Root Resolution:
    1. A path set with set_root_path()
    2. The BUNDLEUTILS_ROOT environment variable
    3. The current working directory, captured on first use

Once captured, the working directory is kept even if the process later
changes directory. Call set_root_path(None) to reset.

Example:
    ```python
    from bundleutils.paths import resolve_path, set_root_path

    set_root_path("/srv/app")
    resolve_path("config/app.json")  # PosixPath('/srv/app/config/app.json')
    ```
"""

from __future__ import annotations

import os
from pathlib import Path

ROOT_ENV_VAR = "BUNDLEUTILS_ROOT"

_root_path: Path | None = None


def get_root_path() -> Path:
    """Return the project root directory.

    Returns:
        Absolute path of the project root.
    """
    global _root_path
    if _root_path is None:
        env_root = os.environ.get(ROOT_ENV_VAR)
        _root_path = Path(env_root).resolve() if env_root else Path.cwd()
    return _root_path


def set_root_path(path: str | os.PathLike[str] | None) -> None:
    """Override the project root, or reset it with None.

    Args:
        path: New project root. Relative paths are resolved against the
            current working directory.
    """
    global _root_path
    _root_path = Path(path).resolve() if path is not None else None


def resolve_path(relative_path: str | os.PathLike[str]) -> Path:
    """Join a path with the project root.

    Absolute paths are returned unchanged.
    """
    return get_root_path() / relative_path
