"""mergeling test suite."""
