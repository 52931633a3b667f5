"""
=============================================================================
HANDLERS MODULE
=============================================================================

A handler takes an HTTPRequest and returns an HTTPResponse:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    REQUEST → HANDLER → RESPONSE                     │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    Request                 Handler                 Response         │
    │   ┌─────────┐           ┌─────────┐           ┌─────────┐          │
    │   │ GET     │           │         │           │ 200 OK  │          │
    │   │ /echo/  │ ────────▶ │  echo   │ ────────▶ │ text/   │          │
    │   │ abc     │           │         │           │ plain   │          │
    │   └─────────┘           └─────────┘           └─────────┘          │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    basic.py   root, echo, user_agent (plain functions)
    files.py   FileHandler (class, holds the base directory)

=============================================================================
"""

from .basic import root, echo, user_agent
from .files import FileHandler, FileStore, extract_filename

__all__ = [
    "root",
    "echo",
    "user_agent",
    "FileHandler",
    "FileStore",
    "extract_filename",
]
