#!/usr/bin/env python3
"""claude-watch - Run the monitor.

Usage:
    python run.py
    # Or: python -m claude_watch.app

The API will be available at http://localhost:5050/api
"""

from claude_watch.app import main

if __name__ == "__main__":
    main()
