"""
Root entry point for the GeoMood application.
Bootstraps the geomood package and runs the command-line interface.
"""

import sys
import os

# Ensure the project root is in python path
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from geomood.main import main

if __name__ == "__main__":
    sys.exit(main())
