#!/usr/bin/env python3
"""
Timeline layout CLI - Entry point for the timeline row layout engine.

This module allows running the layout as:
    python -m timeline_layout timeline.json
    timeline-layout timeline.json  (when installed via pip)
"""

from timeline_layout.cli import main

if __name__ == "__main__":
    main()
