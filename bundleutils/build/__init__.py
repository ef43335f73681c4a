"""
Build-time plugins for bundleutils.

This module holds plugins that attach to a watching build host through its
``register(event, handler)`` surface.

Public API:

Runner : class
    Run the bundled program after each build and restart it on rebuild.
Asset : class
    An emitted artifact and its on-disk path.
Compilation : class
    The assets emitted by one build.

Example:
    from bundleutils.build import Runner

    runner = Runner("server", args=["--port", "8080"])
    runner.apply(compiler)
"""

from .runner import Asset, BuildHost, Compilation, Runner, RunnerState

__all__ = ["Runner", "RunnerState", "Asset", "Compilation", "BuildHost"]
