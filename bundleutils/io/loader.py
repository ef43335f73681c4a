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

"""Dynamic module loading and file reading relative to the project root.

A bundled build cannot use regular imports for files that live outside the
bundle, and it usually does not know where the bundle itself was written.
These helpers resolve paths against the project root instead (see
bundleutils.paths) so the same call works from source and from the bundle.

Resolution Order (load_module):
    1. The exact path
    2. The path with a ".py" suffix
    3. The path with a ".json" suffix
    4. A directory containing "__init__.py" (loaded as a package)

Python modules are imported under a private name and cached by resolved
path, so loading the same file twice returns the same module object. JSON
files are parsed on every call.

Example:
    ```python
    from bundleutils.io import load_module, read_file

    manifest = load_module("package.json")
    settings = load_module("config/settings")       # config/settings.py
    template = read_file("templates/index.html")
    ```
"""

from __future__ import annotations

import hashlib
import importlib.util
import json
import os
from pathlib import Path
import re
import sys
from types import ModuleType
from typing import Any

from bundleutils.exceptions import ModuleLoadError
from bundleutils.paths import resolve_path

MODULE_SUFFIXES = (".py", ".json")

_module_cache: dict[Path, ModuleType] = {}


def _resolve_module_file(base: Path) -> Path | None:
    """Return the file to load for 'base', or None if nothing matches."""
    if base.is_file():
        return base
    for suffix in MODULE_SUFFIXES:
        candidate = base.with_name(base.name + suffix)
        if candidate.is_file():
            return candidate
    package_init = base / "__init__.py"
    if package_init.is_file():
        return package_init
    return None


def _private_module_name(path: Path) -> str:
    """Unique module name for a resolved path: readable stem plus path digest."""
    digest = hashlib.sha256(str(path).encode("utf-8")).hexdigest()[:12]
    stem = path.parent.name if path.name == "__init__.py" else path.stem
    stem = re.sub(r"\W", "_", stem)
    return f"_bundleutils_dynamic_{stem}_{digest}"


def _import_file(path: Path) -> ModuleType:
    """Import a Python source file (or package __init__) by location."""
    path = path.resolve()
    cached = _module_cache.get(path)
    if cached is not None:
        return cached

    module_name = _private_module_name(path)
    search_locations = [str(path.parent)] if path.name == "__init__.py" else None
    spec = importlib.util.spec_from_file_location(
        module_name, path, submodule_search_locations=search_locations
    )
    if spec is None or spec.loader is None:
        raise ModuleLoadError(f"Cannot import module from: {path}")

    module = importlib.util.module_from_spec(spec)
    # Registered before exec so dataclasses and relative imports can find it
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        sys.modules.pop(module_name, None)
        raise

    _module_cache[path] = module
    return module


def load_module(relative_path: str | os.PathLike[str]) -> Any:
    """Load a module or JSON file relative to the project root.

    Args:
        relative_path: Path relative to the project root. The ".py" or
            ".json" suffix may be omitted.

    Returns:
        The imported module for Python files and packages, or the parsed
        value for JSON files.

    Raises:
        ModuleLoadError: If nothing matches the path.
        json.JSONDecodeError: If a JSON file is malformed.

    Example:
        ```python
        manifest = load_module("package")          # package.json
        manifest["dependencies"]
        ```
    """
    base = resolve_path(relative_path)
    target = _resolve_module_file(base)
    if target is None:
        raise ModuleLoadError(
            f"Cannot find module '{relative_path}' (resolved to {base})",
            name=str(relative_path),
            path=str(base),
        )

    if target.suffix == ".json":
        with target.open("r", encoding="utf-8") as f:
            return json.load(f)

    return _import_file(target)


def clear_module_cache() -> None:
    """Forget every module imported by load_module()."""
    for path in list(_module_cache):
        sys.modules.pop(_private_module_name(path), None)
    _module_cache.clear()


def read_file(relative_path: str | os.PathLike[str], encoding: str = "utf-8") -> str:
    """Read a text file relative to the project root.

    Args:
        relative_path: Path relative to the project root.
        encoding: Text encoding. Default is "utf-8".

    Returns:
        The decoded file contents.

    Raises:
        FileNotFoundError: If the file does not exist.
        UnicodeDecodeError: If the bytes are not valid for 'encoding'.
        LookupError: If 'encoding' is not a known codec.
    """
    return resolve_path(relative_path).read_text(encoding=encoding)
