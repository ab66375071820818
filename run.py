#!/usr/bin/env python3
"""Convenience runner for the Strava splits tool.

Usage:
    python run.py splits --start 11/08/2023 --end 11/12/2023 --interval mile
"""
import logging
from strava_splits.main import main

if __name__ == "__main__":
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(level=logging.INFO, format="[%(asctime)s] %(levelname)s %(name)s: %(message)s")
    raise SystemExit(main())
