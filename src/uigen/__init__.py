"""
UI generation service.

Turns a natural-language request into a single React component built from a
fixed component library, previews it, and keeps a checkpoint history.
"""

__version__ = "0.1.0"
