"""Test suite for backdrop."""
