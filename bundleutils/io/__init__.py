"""Input/Output operations for bundleutils.

This module provides project-root relative module loading and file reading,
so code inside a bundle can reach files without knowing where the bundle
was written.

Modules:

loader : module
    Dynamic module loading, JSON loading and text file reading.

Public API:

load_module : function
    Load a Python module, package or JSON file relative to the project root.
read_file : function
    Read a text file relative to the project root.
clear_module_cache : function
    Forget modules previously loaded with load_module.

Example:
    from bundleutils.io import load_module, read_file

    manifest = load_module("package.json")
    banner = read_file("assets/banner.txt")

"""

from .loader import clear_module_cache, load_module, read_file

__all__ = ["load_module", "read_file", "clear_module_cache"]
