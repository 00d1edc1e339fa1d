"""Database management utility script.

Usage:
    python scripts/db_manager.py init            # Initialize database
    python scripts/db_manager.py split           # Show statements of the init file
    python scripts/db_manager.py inspect SCHEMA  # Inspect a schema
"""
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from propmgr.cli import run


if __name__ == "__main__":
    run()
