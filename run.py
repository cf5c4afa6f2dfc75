#!/usr/bin/env python3
"""
Launcher for the feed aggregator when it is not installed as a package.
"""
import sys
from pathlib import Path

# Ensure the project root is in the Python path
project_root = Path(__file__).resolve().parent
sys.path.insert(0, str(project_root))

from feed_aggregator.main import main

if __name__ == "__main__":
    sys.exit(main())
