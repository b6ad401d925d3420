"""
Test suites package.

Keeps `webtests` importable to support:
  - the framework plugin loaded from the root conftest
  - programmatic runners (e.g., `run_tests.py`)
  - IDE navigation
"""
