"""
Build script for ampfilter with optional mypyc compilation.

Usage:
    # Pure Python build (default)
    python -m build

    # Compiled with mypyc
    AMPFILTER_USE_MYPYC=1 pip install .
"""

import os
import sys
from pathlib import Path

from setuptools import setup

# Determine if we should use mypyc
USE_MYPYC = os.environ.get("AMPFILTER_USE_MYPYC", "0") == "1"

# Modules doing per-node or per-tag work on every converted page.
# Note: editor.py is excluded, it stores foreign justhtml node objects
MYPYC_MODULES = [
    "src/ampfilter/serialize.py",
    "src/ampfilter/corrections.py",
    "src/ampfilter/css.py",
]


def build_with_mypyc() -> list:
    """Build extension modules using mypyc."""
    try:
        from mypyc.build import mypycify
    except ImportError:
        print(
            "ERROR: mypyc is not installed. Install with: pip install mypy",
            file=sys.stderr,
        )
        print("Or install with mypyc support: pip install ampfilter[mypyc]", file=sys.stderr)
        sys.exit(1)

    # Verify all modules exist
    for module_path in MYPYC_MODULES:
        if not Path(module_path).exists():
            print(f"ERROR: Module not found: {module_path}", file=sys.stderr)
            sys.exit(1)

    print(f"Building ampfilter with mypyc ({len(MYPYC_MODULES)} modules)")

    mypyc_options = {
        "opt_level": os.environ.get("MYPYC_OPT_LEVEL", "3"),
        "debug_level": os.environ.get("MYPYC_DEBUG_LEVEL", "0"),
        "separate": False,
        "multi_file": False,
    }

    return mypycify(MYPYC_MODULES, **mypyc_options)


if __name__ == "__main__":
    ext_modules = build_with_mypyc() if USE_MYPYC else []

    setup(
        ext_modules=ext_modules,
    )
