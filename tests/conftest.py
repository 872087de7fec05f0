"""Pytest configuration shared by all test suites"""

import sys
from pathlib import Path

# Add project root to path for hybrid_retrieval imports without installing
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Add tests directory to path for the shared fakes module
tests_dir = Path(__file__).parent
sys.path.insert(0, str(tests_dir))
