"""Tests - gadget and constraint-system test suite (run via pytest)."""
