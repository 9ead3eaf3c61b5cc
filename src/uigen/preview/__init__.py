"""
Live preview of generated components.

Source is parsed and interpreted against an explicit scope (React, the
component library, a few built-ins) and rendered to HTML.
"""

from .errors import CompileError, JSReferenceError, JSRuntimeError, JSTypeError, PreviewError, RenderError
from .elements import FRAGMENT, Element, create_element
from .executor import PreviewExecutor, RenderOutcome, compile_component, strip_module_syntax
from .library import LIBRARY_COMPONENTS
from .parser import parse
from .renderer import render_to_html

__all__ = [
    "PreviewExecutor",
    "RenderOutcome",
    "compile_component",
    "strip_module_syntax",
    "parse",
    "render_to_html",
    "create_element",
    "Element",
    "FRAGMENT",
    "LIBRARY_COMPONENTS",
    "PreviewError",
    "CompileError",
    "JSRuntimeError",
    "JSReferenceError",
    "JSTypeError",
    "RenderError",
]
