"""
Pytest configuration for project root.

Ensures the mdcontext package under scripts/ can be imported in tests
without installing it.
"""

import sys
from pathlib import Path

# Add scripts/ to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root / "scripts"))
