"""Test suite for circlefinder."""
