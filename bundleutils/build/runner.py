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

"""Bundler plugin that runs the built program and restarts it on rebuild.

When a server application is bundled in watch mode, the freshly emitted
bundle has to be (re)started after every build. Runner hooks into the
build host and does exactly that:

- after-emit: pick the entry asset to run (once per Runner)
- compile: stop the running process, if any
- done: start the entry as a child process, unless one is running

Entry Selection:
    Candidates are the emitted assets whose on-disk path looks like a
    script (see SCRIPT_PATTERN) and whose name is not a hot-update
    fragment, in the insertion order of the compilation's assets dict.

    1. Entry given but not a candidate: error, the Runner stays inert
    2. No entry and one candidate: use it
    3. No entry and several candidates: use the first, with a warning
    4. Entry given and found: use it

Process Lifecycle:
    The previous process is killed without waiting for it to exit. The next
    'done' event may start the replacement before the operating system has
    finished tearing the old one down; the host is expected to deliver
    events one at a time.

Example:
    ```python
    from bundleutils.build import Runner

    runner = Runner("server")
    runner.apply(compiler)   # compiler.register(event, handler)
    ```
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
import os
from pathlib import Path
import re
import subprocess
import sys
from typing import Any, Protocol, Union

from bundleutils.logging import Logger, get_logger

LOG_PREFIX = "Runner"

SCRIPT_PATTERN = r"\.(py|pyz|js|cjs|mjs)$"
HOT_UPDATE_MARKER = "hot-update"

# Interpreter per entry suffix when no executable is given
INTERPRETERS: dict[str, str] = {
    ".py": sys.executable,
    ".pyz": sys.executable,
    ".js": "node",
    ".cjs": "node",
    ".mjs": "node",
}


class BuildHost(Protocol):
    """Registration surface of a watching build tool."""

    def register(self, event: str, handler: Callable[..., Any]) -> None:
        """Register 'handler' for 'event' ("after-emit", "compile", "done")."""
        ...


@dataclass(frozen=True)
class Asset:
    """An emitted build artifact.

    Attributes:
        exists_at: Path of the artifact on disk.
    """

    exists_at: str


# Hosts may also pass plain mappings such as {"existsAt": "./server.js"}
AssetLike = Union[Asset, Mapping[str, Any]]


def asset_path(asset: AssetLike) -> str | None:
    """Return the on-disk path of an asset, or None if it has none."""
    if isinstance(asset, Mapping):
        return asset.get("existsAt")
    return getattr(asset, "exists_at", None)


@dataclass
class Compilation:
    """Assets emitted by one build, keyed by asset name."""

    assets: dict[str, AssetLike] = field(default_factory=dict)


@dataclass
class RunnerState:
    """Mutable state of one Runner.

    Attributes:
        entry: Selected asset name, or None.
        entry_path: Absolute path of the selected asset, set once.
        running: Whether a process was started and not stopped since.
        process: Handle of the running child process.
        resolved: Whether entry selection already ran.
    """

    entry: str | None = None
    entry_path: Path | None = None
    running: bool = False
    process: subprocess.Popen | None = None
    resolved: bool = False


class Runner:
    """Start the bundled program after each build and stop it before the next.

    Args:
        entry: Name of the asset to run. Default is None, which picks one
            automatically on the first emit.
        executable: Program used to run the entry. Default is None, which
            picks from INTERPRETERS by the entry's suffix.
        args: Extra command-line arguments for the entry.
        script_pattern: Regex an asset path must match to be a candidate.
        logger: Logger for status lines. Default is a printing logger.
    """

    def __init__(
        self,
        entry: str | None = None,
        *,
        executable: str | None = None,
        args: tuple[str, ...] | list[str] = (),
        script_pattern: str = SCRIPT_PATTERN,
        logger: Logger | None = None,
    ) -> None:
        self.state = RunnerState(entry=entry or None)
        self._executable = executable
        self._args = list(args)
        self._script_pattern = re.compile(script_pattern)
        self._logger = logger if logger is not None else get_logger()

    def apply(self, host: BuildHost) -> None:
        """Register the Runner's handlers on a build host."""
        host.register("after-emit", self.on_assets_emitted)
        host.register("compile", self.on_compilation_starts)
        host.register("done", self.on_compilation_ends)

    # -------------------------------
    # Event handlers
    # -------------------------------

    def on_assets_emitted(
        self, compilation: Compilation, callback: Callable[[], Any]
    ) -> None:
        """Select the entry on the first emit, then hand control back.

        'callback' runs even if selection fails, so the host's pipeline
        is never left waiting.
        """
        try:
            if not self.state.resolved:
                self.state.resolved = True
                self._resolve_entry(compilation.assets)
        finally:
            callback()

    def on_compilation_starts(self) -> None:
        """Stop the running process before a new build."""
        state = self.state
        if state.entry and state.running and state.process is not None:
            self._log("info", "Stopping bundle process")
            state.process.kill()
            state.process = None
            state.running = False

    def on_compilation_ends(self) -> None:
        """Start the entry once a build finishes, unless already running."""
        state = self.state
        if state.entry and not state.running:
            state.process = subprocess.Popen(self._command())
            self._logger.blank()
            self._log("success", "Starting bundle process")
            state.running = True

    # -------------------------------
    # Helpers
    # -------------------------------

    def _candidates(self, assets: Mapping[str, AssetLike]) -> list[str]:
        candidates = []
        for name, asset in assets.items():
            path = asset_path(asset)
            if (
                HOT_UPDATE_MARKER not in name
                and path is not None
                and self._script_pattern.search(str(path))
            ):
                candidates.append(name)
        return candidates

    def _resolve_entry(self, assets: Mapping[str, AssetLike]) -> None:
        state = self.state
        entries = self._candidates(assets)

        self._logger.blank()
        if state.entry and state.entry not in entries:
            self._log("error", f"The required entry ({state.entry}) doesn't exist")
            state.entry = None
            self._log_available_entries(entries)
        elif not state.entry and len(entries) == 1:
            state.entry = entries[0]
            self._log("success", f"Using the only available entry: {state.entry}")
        elif not state.entry and len(entries) > 1:
            state.entry = entries[0]
            self._log("warn", f"Doing fallback to the first entry: {state.entry}")
            self._log_available_entries(entries)
        elif state.entry:
            self._log("success", f"Using the following entry: {state.entry}")
        else:
            self._log("error", "No runnable entry was emitted")

        if state.entry:
            state.entry_path = Path(os.path.abspath(asset_path(assets[state.entry])))
            self._log("success", f"Entry file: {state.entry_path}")

    def _command(self) -> list[str]:
        entry_path = self.state.entry_path
        executable = self._executable or INTERPRETERS.get(
            entry_path.suffix, sys.executable
        )
        return [executable, str(entry_path), *self._args]

    def _log_available_entries(self, entries: list[str]) -> None:
        self._log("info", f"These are the available entries: {', '.join(entries)}")

    def _log(self, level: str, message: str) -> None:
        self._logger.status(level, LOG_PREFIX, message)
