"""Tests - Test suite for stark_primitives."""
