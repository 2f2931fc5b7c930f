"""Tests for hostplay."""
