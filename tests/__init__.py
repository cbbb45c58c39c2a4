"""
ELLM Tests Module
Testing framework and test suites

This module contains test components:
- Unit Tests: Individual component testing
- Integration Tests: End-to-end learning and question answering
"""

__version__ = "1.0.0"
__author__ = "ELLM Development Team"
