"""Conversion of raw JSON argument tokens into declared parameter types.

The set of recognised parameter shapes is closed: a single uploaded file, a
list of uploaded files, a structured (object or array) token bound to the
declared type, an enumeration member by name, or a primitive scalar.
"""

import inspect
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from types import NoneType, UnionType
from typing import Any, Literal, Union, get_args, get_origin
from uuid import UUID

from pydantic import TypeAdapter, ValidationError

from pulse_vue.errors import InvalidArgument
from pulse_vue.files import FileLookup, StarletteUploadFile

ParameterKind = Literal["file", "files", "enum", "value", "any"]

_PRIMITIVES: tuple[type, ...] = (bool, int, float, str)
# Scalars converted through pydantic, e.g. ISO-8601 strings into datetimes
_ADAPTED_SCALARS: tuple[type, ...] = (
	Decimal,
	datetime,
	date,
	time,
	timedelta,
	UUID,
)
_SEQUENCE_ORIGINS: tuple[Any, ...] = (list, Sequence)


def _is_upload_type(tp: Any) -> bool:
	return inspect.isclass(tp) and issubclass(tp, StarletteUploadFile)


def _unwrap_optional(annotation: Any) -> tuple[Any, bool]:
	origin = get_origin(annotation)
	if origin is Union or origin is UnionType:
		args = get_args(annotation)
		non_none = [arg for arg in args if arg is not NoneType]
		optional = len(non_none) != len(args)
		if len(non_none) == 1:
			return non_none[0], optional
		return Union[tuple(non_none)], optional  # noqa: UP007
	return annotation, False


def _classify(target: Any) -> ParameterKind:
	if target is Any or target is inspect.Parameter.empty:
		return "any"
	if _is_upload_type(target):
		return "file"
	if get_origin(target) in _SEQUENCE_ORIGINS:
		args = get_args(target)
		if len(args) == 1 and _is_upload_type(args[0]):
			return "files"
	if inspect.isclass(target) and issubclass(target, Enum):
		return "enum"
	return "value"


@dataclass(frozen=True)
class ParameterSpec:
	"""Declared shape of one positional method parameter."""

	name: str
	annotation: Any
	target: Any
	kind: ParameterKind
	optional: bool = False
	adapter: TypeAdapter[Any] | None = field(default=None, repr=False, compare=False)

	@classmethod
	def build(cls, name: str, annotation: Any) -> "ParameterSpec":
		target, optional = _unwrap_optional(annotation)
		kind = _classify(target)
		adapter = TypeAdapter(target) if kind == "value" else None
		return cls(
			name=name,
			annotation=annotation,
			target=target,
			kind=kind,
			optional=optional or kind == "any",
			adapter=adapter,
		)


def coerce_argument(
	token: Any,
	param: ParameterSpec,
	files: FileLookup,
	*,
	method: str = "<method>",
) -> Any:
	"""Convert `token` into the value passed for `param`.

	Raises InvalidArgument when the token cannot be converted.
	"""

	def invalid(reason: str) -> InvalidArgument:
		return InvalidArgument(method, param.name, token, reason)

	if param.kind in ("file", "files"):
		if token is None:
			return None if param.kind == "file" else []
		if not isinstance(token, str):
			raise invalid("expected the name of an upload slot")
		if param.kind == "file":
			return files.first(token)
		return list(files.get_multiple(token))

	if isinstance(token, (dict, list)):
		if param.kind == "any":
			return token
		if param.adapter is None:
			raise invalid(
				f"cannot bind a JSON {_json_kind(token)} to {_type_name(param.target)}"
			)
		try:
			return param.adapter.validate_python(token)
		except ValidationError as exc:
			raise invalid(exc.errors()[0]["msg"]) from exc

	if isinstance(token, str) and param.kind == "enum":
		members = param.target.__members__
		if token not in members:
			raise invalid(f"'{token}' is not a member of {param.target.__name__}")
		return members[token]

	return _coerce_scalar(token, param, invalid)


def _coerce_scalar(
	token: Any, param: ParameterSpec, invalid: Callable[[str], InvalidArgument]
) -> Any:
	if token is None:
		if param.optional:
			return None
		raise invalid(f"null is not a valid {_type_name(param.target)}")
	if param.kind == "any":
		return token
	if param.kind == "enum":
		try:
			return param.target(token)
		except ValueError as exc:
			raise invalid(
				f"no {param.target.__name__} member has value {token!r}"
			) from exc

	target = param.target
	if target in _PRIMITIVES:
		return _convert_primitive(token, target, invalid)
	if target in _ADAPTED_SCALARS and param.adapter is not None:
		try:
			return param.adapter.validate_python(token)
		except ValidationError as exc:
			raise invalid(exc.errors()[0]["msg"]) from exc
	raise invalid(
		f"cannot convert a JSON {_json_kind(token)} to {_type_name(target)}"
	)


def _convert_primitive(
	token: Any, target: type, invalid: Callable[[str], InvalidArgument]
) -> Any:
	if target is str:
		if isinstance(token, str):
			return token
		if isinstance(token, bool):
			return "true" if token else "false"
		return str(token)

	if target is bool:
		if isinstance(token, bool):
			return token
		if isinstance(token, (int, float)):
			return token != 0
		normalized = token.strip().lower()
		if normalized == "true":
			return True
		if normalized == "false":
			return False
		raise invalid("expected true or false")

	if target is int:
		if isinstance(token, bool):
			return int(token)
		if isinstance(token, int):
			return token
		if isinstance(token, float):
			if not token.is_integer():
				raise invalid("expected an integer, got a fractional number")
			return int(token)
		try:
			return int(token.strip())
		except ValueError as exc:
			raise invalid("expected an integer") from exc

	# float
	if isinstance(token, (bool, int, float)):
		return float(token)
	try:
		return float(token.strip())
	except ValueError as exc:
		raise invalid("expected a number") from exc


def _json_kind(token: Any) -> str:
	if isinstance(token, dict):
		return "object"
	if isinstance(token, list):
		return "array"
	if isinstance(token, bool):
		return "boolean"
	if isinstance(token, (int, float)):
		return "number"
	if isinstance(token, str):
		return "string"
	return type(token).__name__


def _type_name(tp: Any) -> str:
	return getattr(tp, "__name__", None) or repr(tp)


__all__ = ["ParameterKind", "ParameterSpec", "coerce_argument"]
