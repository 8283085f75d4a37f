#!/usr/bin/env python
"""
Launcher script for the ShipTrack API.

This script ensures the src/ directory is on the Python path before
launching the application, so it runs from a checkout without installing.

Usage:
    python run.py serve --port 3000
"""

import sys
from pathlib import Path

# Add the src directory to the Python path
src_dir = Path(__file__).parent / "src"
sys.path.insert(0, str(src_dir))

# Now import and run the main application
from shiptrack.main import main

if __name__ == "__main__":
    sys.exit(main())
