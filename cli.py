#!/usr/bin/env python3
"""
lenscli.

Run the CLI from a source checkout without installing it.
Installed, the same app is available as the `lenscli` console script.

Usage:
    python cli.py --help
    python cli.py topics --names
    python cli.py -o json topic --name=orders
    python cli.py connectors --clusterName="*" --names
"""

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from lenscli.cli.main import app, run

__all__ = ["app"]

if __name__ == "__main__":
    run()
