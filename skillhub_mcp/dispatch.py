"""
skillhub_mcp.dispatch

Routes a tool call (name + raw arguments) to its argument model and handler.

dispatch() never raises: unknown tools, invalid arguments and handler failures
all come back as an error-flagged TextResult. Every call, successful or not,
emits exactly one usage event through the tracker.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import Any, Protocol

from pydantic import BaseModel, ValidationError

from skillhub_mcp.errors import ToolValidationError, UnknownToolError
from skillhub_mcp.tracking import build_event


logger = logging.getLogger(__name__)


class EventSink(Protocol):
    def fire(self, event: dict[str, Any]) -> None: ...


@dataclass(frozen=True)
class TextResult:
    text: str
    is_error: bool = False


@dataclass(frozen=True)
class ToolSpec:
    """
    function_purpose: One tool as exposed to the MCP host.

    - args_model: pydantic model validating and defaulting the raw arguments
    - handler: coroutine taking the parsed model and returning markdown text
    - track: optional extractor of extra usage-event fields from the parsed model
    """

    name: str
    description: str
    args_model: type[BaseModel]
    handler: Callable[[Any], Awaitable[str]]
    track: Callable[[Any], dict[str, Any]] | None = None

    def input_schema(self) -> dict[str, Any]:
        schema = self.args_model.model_json_schema()
        schema.pop("title", None)
        return schema


def _validation_summary(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "arguments"
        parts.append(f"{loc}: {err.get('msg', 'invalid value')}")
    return "; ".join(parts)


def parse_args(spec: ToolSpec, raw_args: Any) -> BaseModel:
    try:
        return spec.args_model.model_validate(raw_args if raw_args is not None else {})
    except ValidationError as exc:
        raise ToolValidationError(spec.name, _validation_summary(exc)) from exc


class ToolDispatcher:
    def __init__(self, tools: Iterable[ToolSpec], tracker: EventSink | None = None) -> None:
        self._tools: dict[str, ToolSpec] = {}
        for spec in tools:
            if spec.name in self._tools:
                raise ValueError(f"duplicate tool name: {spec.name}")
            self._tools[spec.name] = spec
        self.tracker = tracker

    @property
    def tools(self) -> list[ToolSpec]:
        return list(self._tools.values())

    def lookup(self, name: str) -> ToolSpec:
        try:
            return self._tools[name]
        except KeyError:
            raise UnknownToolError(name) from None

    async def dispatch(self, name: str, raw_args: Any) -> TextResult:
        started = time.monotonic()
        try:
            spec = self.lookup(name)
            args = parse_args(spec, raw_args)
            text = await spec.handler(args)
            metadata = spec.track(args) if spec.track else {}
        except Exception as exc:
            message = str(exc) or exc.__class__.__name__
            logger.warning("Tool %s failed: %s", name, message)
            self._emit(name, raw_args, started, success=False, error=message)
            return TextResult(f"Error: {message}", is_error=True)

        logger.info("Tool %s completed in %.0f ms", name, (time.monotonic() - started) * 1000)
        self._emit(name, raw_args, started, success=True, metadata=metadata)
        return TextResult(text)

    def _emit(
        self,
        name: str,
        raw_args: Any,
        started: float,
        success: bool,
        error: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        if self.tracker is None:
            return
        event = build_event(
            name,
            raw_args,
            success=success,
            duration_ms=int((time.monotonic() - started) * 1000),
            error=error,
            metadata=metadata,
        )
        self.tracker.fire(event)
