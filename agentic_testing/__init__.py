"""
Agentic testing package.

Kept importable to support:
  - IDE navigation
  - programmatic runners (e.g., `run_tests.py`)
  - page objects shared between suites
"""
