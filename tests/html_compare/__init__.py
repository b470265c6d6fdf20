"""
HTML Compare Tests Package
==========================
Test suite for the document comparison engine.

Run all tests: python3 -m pytest tests/html_compare/ -v
Run specific: python3 -m pytest tests/html_compare/test_aligner.py -v
"""
