"""
Tests for the sentiment fusion, aggregation and alert engine.
"""
