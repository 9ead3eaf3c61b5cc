"""Preview fault types."""


class PreviewError(Exception):
    """Base class for faults raised while compiling or rendering generated code."""

    pass


class CompileError(PreviewError):
    """Source could not be turned into a component (syntax or unresolved name)."""

    pass


class JSRuntimeError(PreviewError):
    """A fault raised while executing generated code."""

    pass


class JSReferenceError(JSRuntimeError):
    pass


class JSTypeError(JSRuntimeError):
    pass


class RenderError(PreviewError):
    """A fault raised while expanding a component tree to markup."""

    pass
