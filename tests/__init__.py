"""
log-audit test suite.

Tests are organized by layer:
    tests/unit/         Unit tests (pure logic, tmp_path files only)
    tests/integration/  Full runs through RunCoordinator and the CLI

Run all tests:
    pytest

Run with coverage:
    pytest --cov=logaudit
"""
