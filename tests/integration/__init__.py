"""Integration test package.

These tests run complete analyses through :class:`fpe.FertilityEngine`
and its boundary helpers (batch analysis and the treatment simulator).
They are pure computation and need no network or external services.
"""
