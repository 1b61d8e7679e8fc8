"""
=============================================================================
HANDLERS MODULE
=============================================================================

A handler takes a parsed HTTPRequest and returns an HTTPResponse. This
server has exactly one: StaticFileHandler, which maps request paths onto
files under the document root.

    Request                 Handler                 Response
   ┌─────────┐           ┌───────────┐           ┌─────────┐
   │ GET     │           │ resolve   │           │ 200 OK  │
   │ /a.css  │ ────────▶ │ read file │ ────────▶ │ text/css│
   └─────────┘           └───────────┘           └─────────┘

=============================================================================
"""

from .static import StaticFileHandler, PathResolver, is_safe_path

__all__ = [
    "StaticFileHandler",
    "PathResolver",
    "is_safe_path",
]
