#!/usr/bin/env python3
# backend/scripts/run_valuation.py
"""
Run a monthly or daily valuation from the command line.

    python backend/scripts/run_valuation.py monthly --date 2026-03-31
    python backend/scripts/run_valuation.py daily
"""
import sys
from pathlib import Path

# Setup path to import tindesk modules
backend_dir = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(backend_dir))

from tindesk.cli import main


if __name__ == "__main__":
    sys.exit(main())
