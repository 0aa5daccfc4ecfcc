"""
Test configuration for marble tests
"""

import sys
from pathlib import Path

import pytest

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from marble import Environment, evaluate_source


@pytest.fixture
def env():
    """Provide a fresh top-level environment for each test"""
    return Environment()


@pytest.fixture
def run(env):
    """Evaluate source text against the test environment"""

    def run(source):
        return evaluate_source(source, env)

    return run
