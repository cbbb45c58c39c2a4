"""Unit tests for ELLM components."""
