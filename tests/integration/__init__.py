"""Integration tests for ELLM sessions, CLI and API."""
