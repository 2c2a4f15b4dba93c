#!/usr/bin/env python3
"""
Run mdbook-rfc from a source checkout without installing it.

Usage:
    python scripts/mdbook_rfc.py install
    python scripts/mdbook_rfc.py supports html

Point book.toml at it with:
    [preprocessor.rfc]
    command = "python3 scripts/mdbook_rfc.py"
"""

import os
import sys

# Ensure rfcbook is importable from the scripts/ directory
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from rfcbook.cli import main


if __name__ == "__main__":
    main()
