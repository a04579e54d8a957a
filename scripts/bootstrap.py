"""Shared setup for maintenance scripts.

Puts the project root on sys.path so ``python scripts/<name>.py`` works
from any directory, and re-exports what every script needs.

Usage:
    from scripts.bootstrap import settings, get_session, init_db, drop_db
"""
import sys
from pathlib import Path

_project_root = Path(__file__).resolve().parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from config.settings import settings
from jobboard.persistence.database import drop_db, get_session, init_db

__all__ = ["settings", "get_session", "init_db", "drop_db"]
