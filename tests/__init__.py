"""
SAM Pro test suite.

Tests are organized by layer:
    tests/unit/         Unit tests (in-memory storage or tmp_path, fast)
    tests/integration/  CLI tests through Click's CliRunner

Run all tests:
    pytest

Run unit tests only:
    pytest tests/unit/
"""
