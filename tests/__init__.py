"""Test suite for the fertility probability engine.

``unit`` covers each stage in isolation (band tables, factor
calculators, validation, interactions, synthesis, classification and
benchmarks); ``integration`` runs full analyses end to end.  To run the
tests, execute `pytest` from the project root.
"""
