#!/usr/bin/env python

"""
Productivity Tracker - Main Entry Point

Tracks projects, tasks and working time with a free-running stopwatch or
Pomodoro cycles. All state is kept in one local JSON file.

Usage:
    python main.py <command> [options]
    python main.py --help

Requirements:
    - Python 3.10+
    - See pyproject.toml for dependencies
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from tracker.cli import main


if __name__ == "__main__":
    sys.exit(main())
