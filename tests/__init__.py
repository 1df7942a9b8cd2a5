"""
lictool test suite
==================

Test Modules
------------
- test_placeholders.py: Token syntax and field aliases
- test_models.py: Pydantic records and SPDX parsing
- test_renderer.py: Single-pass substitution and missing fields
- test_cache.py: File and memory cache stores, atomic writes
- test_catalog.py: Fallback order cache → network → stale cache → error
- test_resolver.py: End-to-end resolution
- test_config.py: TOML configuration
- test_fields.py: Field mapping construction
- test_writer.py: License file writing
- test_cli.py: Command-line interface

Running Tests
-------------
    # Run all tests
    pytest

    # Run specific module
    pytest tests/test_catalog.py

    # Run specific test class
    pytest tests/test_catalog.py::TestFallback
"""
