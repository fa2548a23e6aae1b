#!/usr/bin/env python3
"""Launcher: ``python main.py --config config.yaml``."""

import sys

from molb.main import main

if __name__ == "__main__":
    sys.exit(main())
