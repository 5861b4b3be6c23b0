"""Observability helpers.

Structured logging through structlog, a tracing decorator for adapter and
service calls, and correlation ids bound through structlog contextvars.
"""

import asyncio
import functools
import json
import logging
import re
import sys
import time
import traceback
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any, TypeVar, cast

import structlog
from pydantic import BaseModel, ConfigDict, Field
from structlog.contextvars import bind_contextvars, reset_contextvars, unbind_contextvars

_SHARED_PROCESSORS: list[Any] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.processors.UnicodeDecoder(),
]


def _renderer() -> Any:
    if sys.stderr.isatty():
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer()


structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        *_SHARED_PROCESSORS,
        structlog.processors.dict_tracebacks,
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()

F = TypeVar("F", bound=Callable[..., Any])

_SENSITIVE_KEY_RE = re.compile(r"(token|key|secret|password|authorization|dsn)", re.IGNORECASE)


def configure_stdlib_json_logging(level: str = "INFO", file_target: str | None = None) -> None:
    """Route stdlib logging records through structlog's renderer.

    Args:
        level: Root log level name
        file_target: Optional file that receives JSON lines as well as stderr
    """
    console = logging.StreamHandler()
    console.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_SHARED_PROCESSORS,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(),
            ],
        )
    )
    handlers: list[logging.Handler] = [console]

    if file_target:
        file_handler = logging.FileHandler(file_target, encoding="utf-8")
        file_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                foreign_pre_chain=_SHARED_PROCESSORS,
                processors=[
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    structlog.processors.JSONRenderer(),
                ],
            )
        )
        handlers.append(file_handler)

    root = logging.getLogger()
    root.handlers = handlers
    root.setLevel(level.upper())


def set_correlation_id(correlation_id: str) -> None:
    """Bind a correlation id to every log line in the current context."""
    bind_contextvars(correlation_id=correlation_id)


def clear_correlation_id() -> None:
    unbind_contextvars("correlation_id")


def _mask_scalar(value: Any) -> Any:
    if value is None:
        return None
    s = str(value)
    if len(s) <= 8:
        return "***"
    return f"{s[:4]}…{s[-3:]}"


def _redact_obj(obj: Any) -> Any:
    if isinstance(obj, dict):
        return {
            k: (_mask_scalar(v) if _SENSITIVE_KEY_RE.search(str(k)) else _redact_obj(v))
            for k, v in obj.items()
        }
    if isinstance(obj, list):
        return [_redact_obj(i) for i in obj]
    return obj


def _serialize_value(value: Any, max_length: int = 1000) -> Any:
    """Safely serialize a value for logging, truncating long payloads."""
    try:
        if isinstance(value, BaseModel):
            return value.model_dump(mode="json", exclude_unset=True)

        json_str = json.dumps(value, default=str)
        if len(json_str) > max_length:
            return json_str[:max_length] + "..."
        return json.loads(json_str)

    except (TypeError, ValueError):
        str_repr = str(value)
        if len(str_repr) > max_length:
            return str_repr[:max_length] + "..."
        return str_repr


def _safe_serialize_kv(key: str, value: Any, max_length: int) -> Any:
    ser = _serialize_value(value, max_length)
    if _SENSITIVE_KEY_RE.search(str(key)):
        if isinstance(ser, dict | list):
            return _redact_obj(ser)
        return _mask_scalar(ser)
    return ser


class FunctionTrace(BaseModel):
    """Model for function execution trace data."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    function_name: str = Field(description="Fully qualified function name")
    execution_id: str = Field(description="Unique execution ID")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    duration_ms: float | None = None

    args: list[Any] = Field(default_factory=list)
    kwargs: dict[str, Any] = Field(default_factory=dict)
    result: Any | None = None

    is_success: bool = True
    error_type: str | None = None
    error_message: str | None = None

    is_async: bool = False
    metadata: dict[str, Any] = Field(default_factory=dict)


def trace_wrapper(
    *,
    capture_result: bool = True,
    capture_args: bool = True,
    max_arg_length: int = 1000,
    log_level: str = "INFO",
    add_metadata: dict[str, Any] | None = None,
    warn_over_ms: float | None = None,
    expected_errors: tuple[type[Exception], ...] = (),
) -> Callable[[F], F]:
    """Decorator for function tracing.

    Logs entry arguments, return value, duration and failures of sync and
    async callables. Exceptions are logged and re-raised unchanged.

    Args:
        capture_result: Whether to log the return value
        capture_args: Whether to log input arguments
        max_arg_length: Maximum length for serialized arguments
        log_level: Log level for successful executions
        add_metadata: Extra fields included in every log line
        warn_over_ms: Log a warning when a call takes longer than this
        expected_errors: Exceptions that are an ordinary outcome of the call;
            logged at INFO without a traceback, then re-raised

    Example:
        >>> @trace_wrapper(capture_result=False)
        ... async def fetch(player: str) -> str:
        ...     return "..."
    """

    def decorator(func: F) -> F:
        function_name = f"{func.__module__}.{func.__qualname__}"
        level = log_level.lower()

        def _start(
            args: tuple[Any, ...], kwargs: dict[str, Any], is_async: bool
        ) -> tuple[FunctionTrace, Mapping[str, Any]]:
            execution_id = f"{function_name}_{int(time.time() * 1000000)}"
            trace = FunctionTrace(
                function_name=function_name,
                execution_id=execution_id,
                is_async=is_async,
                metadata=add_metadata or {},
            )
            if capture_args:
                trace.args = [_serialize_value(arg, max_arg_length) for arg in args]
                trace.kwargs = {
                    k: _safe_serialize_kv(k, v, max_arg_length) for k, v in kwargs.items()
                }
            tokens = bind_contextvars(execution_id=execution_id)
            logger.log(
                logging.getLevelName(level.upper()),
                f"Executing: {function_name}",
                execution_id=execution_id,
                args=trace.args if capture_args else None,
                kwargs=trace.kwargs if capture_args else None,
                **trace.metadata,
            )
            return trace, tokens

        def _succeeded(trace: FunctionTrace, result: Any, started: float) -> None:
            trace.duration_ms = (time.perf_counter() - started) * 1000
            if capture_result:
                trace.result = _redact_obj(_serialize_value(result, max_arg_length))
            logger.log(
                logging.getLevelName(level.upper()),
                f"Successfully executed: {function_name}",
                execution_id=trace.execution_id,
                duration_ms=trace.duration_ms,
                result=trace.result if capture_result else None,
                **trace.metadata,
            )
            if warn_over_ms is not None and trace.duration_ms > warn_over_ms:
                logger.warning(
                    f"Slow call: {function_name}",
                    execution_id=trace.execution_id,
                    duration_ms=trace.duration_ms,
                    threshold_ms=warn_over_ms,
                )

        def _failed(trace: FunctionTrace, error: Exception, started: float) -> None:
            trace.duration_ms = (time.perf_counter() - started) * 1000
            trace.is_success = False
            trace.error_type = type(error).__name__
            trace.error_message = str(error)
            if isinstance(error, expected_errors):
                logger.info(
                    f"Expected error in function: {function_name}",
                    execution_id=trace.execution_id,
                    duration_ms=trace.duration_ms,
                    error_type=trace.error_type,
                    error_message=trace.error_message,
                    **trace.metadata,
                )
                return
            logger.error(
                f"Error in function: {function_name}",
                execution_id=trace.execution_id,
                duration_ms=trace.duration_ms,
                error_type=trace.error_type,
                error_message=trace.error_message,
                traceback=traceback.format_exc(),
                args=trace.args if capture_args else None,
                **trace.metadata,
            )

        if asyncio.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                trace, tokens = _start(args, kwargs, is_async=True)
                started = time.perf_counter()
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    _failed(trace, e, started)
                    raise
                else:
                    _succeeded(trace, result, started)
                    return result
                finally:
                    # Restores the caller's execution_id when calls are nested
                    reset_contextvars(**tokens)

            return cast(F, async_wrapper)

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            trace, tokens = _start(args, kwargs, is_async=False)
            started = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                _failed(trace, e, started)
                raise
            else:
                _succeeded(trace, result, started)
                return result
            finally:
                reset_contextvars(**tokens)

        return cast(F, sync_wrapper)

    return decorator


def trace_performance(
    func: F | None = None, *, expected_errors: tuple[type[Exception], ...] = ()
) -> Any:
    """Decorator focused on timing; arguments and results are not captured.

    Usable bare (``@trace_performance``) or with ``expected_errors``.
    """
    decorator = trace_wrapper(
        capture_result=False,
        capture_args=False,
        log_level="DEBUG",
        expected_errors=expected_errors,
    )
    return decorator(func) if func is not None else decorator


def trace_adapter(
    func: F | None = None, *, expected_errors: tuple[type[Exception], ...] = ()
) -> Any:
    """Decorator for adapter layer calls."""
    decorator = trace_wrapper(
        capture_result=False,
        capture_args=True,
        log_level="INFO",
        add_metadata={"layer": "adapter"},
        expected_errors=expected_errors,
    )
    return decorator(func) if func is not None else decorator
