#!/usr/bin/env python
"""
SculptNet - Main Entry Point
============================
Record and replay gesture sculpting sessions.
"""

import sys
from pathlib import Path

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv(Path(__file__).parent / ".env")

from sculptnet.ui import main

if __name__ == "__main__":
    sys.exit(main())
