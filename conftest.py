"""
Root conftest.py - Set up Python path before test collection.

Loaded by pytest before any test modules are imported, so the flat
top-level packages (relay_bot, agents, clients) import without installing.
"""

import sys
from pathlib import Path

impl_root = Path(__file__).parent
sys.path.insert(0, str(impl_root))
