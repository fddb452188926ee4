from __future__ import annotations

import logging
import traceback
from typing import Any, ClassVar, Literal

logger = logging.getLogger(__name__)

ErrorCode = Literal[
	"request.malformed",
	"method.not_found",
	"method.arity",
	"method.argument",
	"method.failed",
	"method.ambiguous",
	"component.definition",
	"component.not_found",
	"system",
]


class UpdateError(Exception):
	"""Base class for every failure that aborts a component update cycle."""

	code: ClassVar[ErrorCode] = "system"
	details: dict[str, Any]

	def __init__(self, message: str, **details: Any) -> None:
		super().__init__(message)
		self.details = details


class MalformedRequest(UpdateError):
	"""The request payload could not be merged or bound to the view-model."""

	code: ClassVar[ErrorCode] = "request.malformed"


class MethodNotFound(UpdateError):
	code: ClassVar[ErrorCode] = "method.not_found"
	name: str

	def __init__(self, name: str, view_model: str | None = None) -> None:
		where = f" on {view_model}" if view_model else ""
		super().__init__(
			f"Method '{name}' does not exist{where} or is not callable from the client",
			method=name,
			view_model=view_model,
		)
		self.name = name


class ArityMismatch(UpdateError):
	code: ClassVar[ErrorCode] = "method.arity"

	def __init__(self, method: str, expected: int, received: int) -> None:
		super().__init__(
			f"Method '{method}' expects {expected} argument(s), received {received}",
			method=method,
			expected=expected,
			received=received,
		)


class InvalidArgument(UpdateError):
	code: ClassVar[ErrorCode] = "method.argument"

	def __init__(self, method: str, parameter: str, token: Any, reason: str) -> None:
		super().__init__(
			f"Invalid value {token!r} for parameter '{parameter}' of '{method}': {reason}",
			method=method,
			parameter=parameter,
			reason=reason,
		)


class MethodExecutionFailed(UpdateError):
	code: ClassVar[ErrorCode] = "method.failed"

	def __init__(self, method: str, cause: BaseException) -> None:
		super().__init__(
			f"Method '{method}' raised {type(cause).__name__}: {cause}",
			method=method,
			cause=type(cause).__name__,
		)


class AmbiguousMethod(TypeError):
	"""Raised while building a method registry when two methods share a client name."""

	code: ClassVar[ErrorCode] = "method.ambiguous"


class DefinitionError(ValueError):
	code: ClassVar[ErrorCode] = "component.definition"


def _format_stack(exc: BaseException) -> str:
	return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))


def report(
	exc: BaseException,
	*,
	code: ErrorCode | None = None,
	details: dict[str, Any] | None = None,
	message: str | None = None,
) -> None:
	"""Log a failure with its code, details and stack."""
	resolved_code = code or getattr(exc, "code", "system")
	payload_details: dict[str, Any] = {}
	if isinstance(exc, UpdateError):
		payload_details.update(exc.details)
	if details:
		payload_details.update(details)
	logger.error(
		"pulse-vue error code=%s message=%s details=%s\n%s",
		resolved_code,
		message or str(exc),
		payload_details,
		_format_stack(exc),
	)


__all__ = [
	"AmbiguousMethod",
	"ArityMismatch",
	"DefinitionError",
	"ErrorCode",
	"InvalidArgument",
	"MalformedRequest",
	"MethodExecutionFailed",
	"MethodNotFound",
	"UpdateError",
	"report",
]
