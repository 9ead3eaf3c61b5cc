"""
Preview Executor

Turns generated component source into a live, re-renderable component and
renders it to HTML. Two independent fault channels are kept: compile faults
(syntax, unknown names, missing GeneratedUI) and render faults raised while
mounting the component. Neither is ever raised to the caller.
"""

from typing import Any, Literal, Protocol

from pydantic import BaseModel, ConfigDict, Field

from uigen.core import get_logger
from uigen.monitoring import metrics_collector

from .builtins import build_scope
from .elements import h
from .errors import CompileError, PreviewError
from .interpreter import Interpreter, JSFunction
from .parser import parse
from .renderer import render_component, render_to_html

logger = get_logger(__name__)

ENTRY_POINT = "GeneratedUI"
STRIPPED_PREFIXES = ("import ", "export ")


class PreviewErrorSink(Protocol):
    """Shared store slot that mirrors the compile fault."""

    def set_preview_error(self, error: str | None) -> None: ...


class RenderOutcome(BaseModel):
    """Result of one render pass."""

    model_config = ConfigDict(frozen=True)

    html: str
    error: str | None = None
    channel: Literal["compile", "render"] | None = Field(default=None)


def strip_module_syntax(code: str) -> str:
    """Drop lines whose trimmed text starts an import or export statement."""
    return "\n".join(
        line for line in code.split("\n") if not line.strip().startswith(STRIPPED_PREFIXES)
    )


def compile_component(code: str, scope: dict[str, Any]) -> Any:
    """
    Compile source into its GeneratedUI component.

    Raises:
        PreviewError: If the source does not parse, references unknown
            names, faults while running, or defines no GeneratedUI
    """
    program = parse(strip_module_syntax(code), scope.keys())
    environment = Interpreter(scope).run(program)

    if not environment.has(ENTRY_POINT):
        raise CompileError(f"{ENTRY_POINT} is not defined")
    component = environment.lookup(ENTRY_POINT)
    if not callable(component):
        raise CompileError(f"{ENTRY_POINT} is not a function")
    return component


def fault_panel(title: str, message: str, detail: str | None = None) -> str:
    panel = h(
        "div", "text-center max-w-md bg-white rounded-xl shadow-lg p-8",
        h("h3", "text-lg font-semibold text-gray-900 mb-2", title),
        h("p", "text-sm text-gray-600 mb-4", detail or message),
        h("div", "text-xs text-left bg-red-50 border border-red-200 rounded-lg p-4 font-mono text-red-800", message),
    )
    return render_to_html(h("div", "flex items-center justify-center h-full", panel))


EMPTY_PANEL = render_to_html(h(
    "div", "flex items-center justify-center h-full",
    h("div", "text-center bg-white rounded-xl shadow-lg p-12",
      h("p", "text-base font-medium text-gray-700", "No preview available"),
      h("p", "text-sm text-gray-500 mt-2", "Generate code to see live preview")),
))


class PreviewExecutor:
    """Compiles generated code and renders it behind a fault boundary."""

    def __init__(self, store: PreviewErrorSink | None = None, scope: dict[str, Any] | None = None) -> None:
        self.store = store
        self.scope = build_scope(scope)
        self.code = ""
        self.component: Any = None
        self.error: str | None = None
        self.render_error: str | None = None

    def update(self, code: str | None) -> bool:
        """
        Recompute the previewed component for new code.

        Returns:
            True if a component is now previewed
        """
        self.error = None
        self.render_error = None
        self._publish(None)
        self.code = code or ""

        if not self.code:
            self.component = None
            return False

        try:
            self.component = compile_component(self.code, self.scope)
        except PreviewError as e:
            self._compile_fault(str(e))
        except RecursionError:
            self._compile_fault("Maximum call stack size exceeded")
        except Exception as e:
            logger.exception("preview_compile_crashed")
            self._compile_fault(str(e) or type(e).__name__)
        else:
            logger.debug("preview_compiled", code_length=len(self.code))
        return self.component is not None

    def render(self, props: dict[str, Any] | None = None) -> RenderOutcome:
        """Mount the current component; faults become a fault panel."""
        if self.error is not None:
            return RenderOutcome(html=fault_panel("Preview Error", self.error), error=self.error, channel="compile")
        if self.component is None:
            return RenderOutcome(html=EMPTY_PANEL)

        self.render_error = None
        if isinstance(self.component, JSFunction):
            self.component.interpreter.reset_budget()
        try:
            markup = render_component(self.component, props)
        except PreviewError as e:
            return self._render_fault(str(e))
        except Exception as e:
            logger.exception("preview_render_crashed")
            return self._render_fault(str(e) or type(e).__name__)

        return RenderOutcome(html=f'<div class="min-h-full">{markup}</div>')

    def _publish(self, error: str | None) -> None:
        if self.store is not None:
            self.store.set_preview_error(error)

    def _compile_fault(self, message: str) -> None:
        logger.warning("preview_compile_fault", error=message)
        metrics_collector.record_preview_fault("compile")
        self.error = message
        self.component = None
        self._publish(message)

    def _render_fault(self, message: str) -> RenderOutcome:
        logger.warning("preview_render_fault", error=message)
        metrics_collector.record_preview_fault("render")
        self.render_error = message
        html = fault_panel(
            "Render Error", message, "The generated component encountered an error while rendering."
        )
        return RenderOutcome(html=html, error=message, channel="render")
