"""Pytest configuration and fixtures."""

import json

import pytest


@pytest.fixture
def sample_package_json():
    """Sample package.json content for testing."""
    return """{
  "name": "test-project",
  "version": "1.0.0",
  "scripts": {
    "test": "jest"
  },
  "dependencies": {
    "express": "^3.0.0",
    "left-pad": "^1.0.0",
    "lodash": "~4.17.0"
  },
  "devDependencies": {
    "jest": "^29.0.0"
  }
}
"""


@pytest.fixture
def project_dir(tmp_path, sample_package_json):
    """Create a project directory containing package.json."""
    (tmp_path / "package.json").write_text(sample_package_json)
    return tmp_path


@pytest.fixture
def read_json():
    """Load a JSON file from disk."""
    def _read(path):
        return json.loads(path.read_text())
    return _read
