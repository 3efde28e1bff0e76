"""
Test suite for the marketplace converter.

Run all tests: pytest
Run unit tests only: pytest tests/unit/
Run specific file: pytest tests/unit/test_field_mappers.py -v
"""
