"""Test run execution engine for manual and oracle-driven suite runs."""
