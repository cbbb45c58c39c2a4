"""
ELLM API Module
RESTful API interface

This module contains the API components:
- Server: FastAPI application exposing learn, query, knowledge and reset
- Main: command-line launcher for the server
"""

__version__ = "1.0.0"
__author__ = "ELLM Development Team"

# API components
from .server import app, run_server

__all__ = [
    "app",
    "run_server"
]
