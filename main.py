#!/usr/bin/env python3
"""
PrismTrace - A Python Ray Tracing Renderer

Main entry point for rendering scenes.
"""

import sys

from prismtrace.cli import main


if __name__ == '__main__':
    sys.exit(main())
