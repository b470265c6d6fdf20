"""HTML Compare test suite."""
