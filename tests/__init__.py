"""Host Bridge Test Suite.

Test Organization:
    tests/
        unit/                   - Unit tests for individual modules
            hostbridge/
                core/           - Core framework tests
                entities/       - Entity kind tests
                integrations/   - Built-in integration tests
        conftest.py             - Pytest configuration and global fixtures

Running Tests:
    # Run all tests
    pytest

    # Run with coverage
    pytest --cov=hostbridge --cov-report=html

    # Run specific test file
    pytest tests/unit/hostbridge/core/test_connection.py

    # Run tests matching pattern
    pytest -k reconnect
"""
