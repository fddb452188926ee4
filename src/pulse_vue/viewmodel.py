"""
Server-side view-model base class.

A view-model declares its client state as annotated class attributes and the
behaviour the client may call as regular methods. One instance is rebuilt from
the request payload for every update and disposed at the end of it.

```python
class Counter(pv.ViewModel):
    count: int = 0
    step: pv.Prop[int] = 1

    def increment(self):
        self.count += self.step
        self.run_js("console.log('incremented')")
```
"""

import copy
import inspect
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import TracebackType
from typing import (
	TYPE_CHECKING,
	Annotated,
	Any,
	ClassVar,
	Generic,
	Literal,
	Self,
	TypeAlias,
	TypeVar,
	get_args,
	get_origin,
	get_type_hints,
)

from pydantic import TypeAdapter, ValidationError
from typing_extensions import override

from pulse_vue.config import DEFAULT_CONFIG, SerializationConfig
from pulse_vue.errors import MalformedRequest
from pulse_vue.helpers import Disposable

T = TypeVar("T")
F = TypeVar("F", bound=Callable[..., Any])

_MISSING: Any = object()


@dataclass(frozen=True)
class FieldSpec:
	prop: bool = False
	local: bool = False


PROP = FieldSpec(prop=True)
LOCAL = FieldSpec(local=True)


if TYPE_CHECKING:
	Prop: TypeAlias = Annotated[T, PROP]
	Local: TypeAlias = Annotated[T, LOCAL]
else:

	class Prop(Generic[T]):
		"""Field whose value is owned by the parent component (a Vue prop)."""

		def __class_getitem__(cls, value_type: Any):
			return Annotated[value_type, PROP]

	class Local(Generic[T]):
		"""Client-only field: part of the initial data, never sent back to the server."""

		def __class_getitem__(cls, value_type: Any):
			return Annotated[value_type, LOCAL]


def _extract_field_spec(annotation: Any) -> tuple[Any, FieldSpec]:
	if get_origin(annotation) is Annotated:
		args = get_args(annotation)
		specs = [meta for meta in args[1:] if isinstance(meta, FieldSpec)]
		if len(specs) > 1:
			raise TypeError("A view-model field cannot be both a Prop and a Local")
		if specs:
			rest = [meta for meta in args[1:] if not isinstance(meta, FieldSpec)]
			base = Annotated[args[0], *rest] if rest else args[0]
			return base, specs[0]
	return annotation, FieldSpec()


@dataclass(frozen=True)
class ViewModelField:
	name: str
	annotation: Any
	default: Any = _MISSING
	prop: bool = False
	local: bool = False
	adapter: TypeAdapter[Any] = field(init=False, repr=False, compare=False)

	def __post_init__(self) -> None:
		object.__setattr__(self, "adapter", TypeAdapter(self.annotation))

	def json_name(self, config: SerializationConfig) -> str:
		return config.json_name(self.name)

	def default_value(self) -> Any:
		if self.default is _MISSING:
			return None
		return copy.deepcopy(self.default)

	def lookup(
		self, payload: Mapping[str, Any], config: SerializationConfig
	) -> tuple[bool, Any]:
		"""Find this field in a JSON object under its JSON name or Python name."""
		json_name = self.json_name(config)
		if json_name in payload:
			return True, payload[json_name]
		if self.name in payload:
			return True, payload[self.name]
		return False, None

	def serialize(self, value: Any) -> Any:
		# Fields without a default start as None whatever their declared type
		if value is None:
			return None
		return self.adapter.dump_python(value, mode="json")


class ComputedExpression:
	"""Client-side computed property, declared with `computed("...")`.

	The expression is the body of a JavaScript function evaluated by the client
	runtime; it is not part of the server state.
	"""

	expression: str
	name: str

	def __init__(self, expression: str) -> None:
		self.expression = expression
		self.name = ""

	def __set_name__(self, owner: type[Any], name: str) -> None:
		self.name = name

	def __repr__(self) -> str:
		return f"computed({self.expression!r})"


def computed(expression: str) -> ComputedExpression:
	return ComputedExpression(expression)


def watch(*fields: str) -> Callable[[F], F]:
	"""Run the decorated method on the server when one of `fields` changes on the client."""
	if not fields:
		raise TypeError("@watch requires at least one field name")

	def decorator(fn: F) -> F:
		existing: tuple[str, ...] = getattr(fn, "__vue_watch__", ())
		fn.__vue_watch__ = (*existing, *fields)  # pyright: ignore[reportFunctionMemberAccess]
		return fn

	return decorator


def script(*, pre: str = "", post: str = "") -> Callable[[F], F]:
	"""Attach client script to a method: `pre` runs before the server call,
	`post` after the update was applied (with `this` bound to the component)."""

	def decorator(fn: F) -> F:
		fn.__vue_script__ = (pre, post)  # pyright: ignore[reportFunctionMemberAccess]
		return fn

	return decorator


def mixin(source: str) -> Callable[[type[T]], type[T]]:
	"""Class decorator adding a client mixin script block to a view-model."""

	def decorator(cls: type[T]) -> type[T]:
		inherited: tuple[str, ...] = getattr(cls, "__vue_mixins__", ())
		setattr(cls, "__vue_mixins__", (*inherited, source))
		return cls

	return decorator


def _is_plain_value(value: Any) -> bool:
	if callable(value) or isinstance(
		value, (staticmethod, classmethod, property, ComputedExpression)
	):
		return False
	return not hasattr(value, "__get__")


class ViewModel(Disposable):
	"""
	Base class for server-side view-models.

	Public annotated attributes (and public plain class values) are the
	component's state. `Prop[T]` marks fields supplied by the parent component,
	`Local[T]` marks client-only fields. Private attributes (leading underscore)
	are never serialized.

	Override `on_created()` to run code when the client component is created,
	and `on_dispose()` to release resources at the end of each request.
	"""

	__vue_fields__: ClassVar[tuple[ViewModelField, ...]]
	__vue_mixins__: ClassVar[tuple[str, ...]] = ()

	_scripts: list[str]
	_disposed: bool

	def __init__(self, **values: Any) -> None:
		self._scripts = []
		self._disposed = False
		fields = {f.name: f for f in type(self).fields()}
		unknown = set(values) - set(fields)
		if unknown:
			raise TypeError(
				f"{type(self).__name__} got unexpected field(s): {', '.join(sorted(unknown))}"
			)
		for name, f in fields.items():
			setattr(self, name, values[name] if name in values else f.default_value())

	@classmethod
	def fields(cls) -> tuple[ViewModelField, ...]:
		"""Declared state fields, base classes first, in declaration order."""
		cached = cls.__dict__.get("__vue_fields__")
		if cached is not None:
			return cached

		hints = get_type_hints(cls, include_extras=True)
		collected: dict[str, ViewModelField] = {}
		for klass in reversed(cls.__mro__):
			if klass is ViewModel or not issubclass(klass, ViewModel):
				continue
			annotations = inspect.get_annotations(klass)
			for name in annotations:
				if name.startswith("_"):
					continue
				hint = hints.get(name, Any)
				if get_origin(hint) is ClassVar or hint is ClassVar:
					continue
				default = klass.__dict__.get(name, _MISSING)
				if default is not _MISSING and not _is_plain_value(default):
					continue
				if default is _MISSING and name in collected:
					default = collected[name].default
				annotation, spec = _extract_field_spec(hint)
				collected[name] = ViewModelField(
					name=name,
					annotation=annotation,
					default=default,
					prop=spec.prop,
					local=spec.local,
				)
			for name, value in klass.__dict__.items():
				if name.startswith("_") or name in collected or name in annotations:
					continue
				if not _is_plain_value(value):
					continue
				collected[name] = ViewModelField(name=name, annotation=Any, default=value)

		result = tuple(collected.values())
		type.__setattr__(cls, "__vue_fields__", result)
		return result

	@classmethod
	def from_json(
		cls, payload: Mapping[str, Any], config: SerializationConfig = DEFAULT_CONFIG
	) -> Self:
		"""Build an instance from a JSON object, binding each declared field.

		Fields missing from `payload` keep their default, unknown keys are
		ignored. Raises MalformedRequest when a value cannot be bound.
		"""
		if not isinstance(payload, Mapping):
			raise MalformedRequest(
				f"{cls.__name__} payload must be a JSON object, got {type(payload).__name__}"
			)
		values: dict[str, Any] = {}
		for f in cls.fields():
			found, raw = f.lookup(payload, config)
			if not found:
				continue
			try:
				values[f.name] = f.adapter.validate_python(raw)
			except ValidationError as exc:
				raise MalformedRequest(
					f"Invalid value for {cls.__name__}.{f.name}: {exc.errors()[0]['msg']}",
					field=f.name,
					view_model=cls.__name__,
				) from exc
		instance = cls()
		for name, value in values.items():
			setattr(instance, name, value)
		return instance

	def to_json(
		self, config: SerializationConfig = DEFAULT_CONFIG, *, include_local: bool = False
	) -> dict[str, Any]:
		"""Serialize the state. Snapshots and initial data both use this rule."""
		result: dict[str, Any] = {}
		for f in type(self).fields():
			if f.local and not include_local:
				continue
			result[f.json_name(config)] = f.serialize(getattr(self, f.name))
		return result

	def absorb(
		self,
		current: dict[str, Any],
		request: Mapping[str, Any],
		config: SerializationConfig = DEFAULT_CONFIG,
	) -> None:
		"""Copy the request's raw values for declared fields into `current`.

		Called once per update before the method runs. Override to control
		which request values seed the current state.
		"""
		for f in type(self).fields():
			if f.local:
				continue
			found, raw = f.lookup(request, config)
			if found:
				current[f.json_name(config)] = raw

	def run_js(self, code: str) -> None:
		"""Queue JavaScript to run on the client once the update is applied."""
		self._scripts.append(code)

	def client_script(self) -> str:
		return "\n".join(self._scripts)

	def on_created(self) -> None:
		pass

	def on_dispose(self) -> None:
		pass

	@property
	def disposed(self) -> bool:
		return self._disposed

	@override
	def dispose(self) -> None:
		if self._disposed:
			return
		self._disposed = True
		self.__disposed__ = True
		self.on_dispose()

	def __enter__(self) -> Self:
		return self

	def __exit__(
		self,
		exc_type: type[BaseException] | None = None,
		exc_val: BaseException | None = None,
		exc_tb: TracebackType | None = None,
	) -> Literal[False]:
		self.dispose()
		return False

	@override
	def __repr__(self) -> str:
		props = " ".join(
			f"{f.name}={getattr(self, f.name, None)!r}" for f in type(self).fields()
		)
		return f"<{type(self).__name__} {props}>"


__all__ = [
	"ComputedExpression",
	"FieldSpec",
	"Local",
	"Prop",
	"ViewModel",
	"ViewModelField",
	"computed",
	"mixin",
	"script",
	"watch",
]
