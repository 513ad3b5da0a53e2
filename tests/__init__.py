"""
Test suite for mlseries

Contains:
- tests/unit/          : Unit tests for individual modules
"""
