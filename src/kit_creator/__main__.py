#!/usr/bin/env python3
"""
AI POD Kit Creator - Main Entry Point

Run with: python -m kit_creator <kit|edit|analyze> ...
"""

import sys

from .pipeline import main

if __name__ == "__main__":
    sys.exit(main())
