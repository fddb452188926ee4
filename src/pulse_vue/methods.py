"""Registry of client-callable view-model methods.

Each view-model type gets one `MethodRegistry`, built the first time the type
is registered or updated and cached afterwards. A registry maps the names the
client may send to a `RemoteMethod`, which knows its parameter shapes and how
to coerce argument tokens before calling the method.
"""

import inspect
import logging
import re
import threading
from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from types import FunctionType
from typing import Any, ClassVar, get_type_hints

from typing_extensions import override

from pulse_vue.coerce import ParameterSpec, coerce_argument
from pulse_vue.config import DEFAULT_CONFIG, SerializationConfig
from pulse_vue.errors import (
	AmbiguousMethod,
	ArityMismatch,
	MethodExecutionFailed,
	MethodNotFound,
)
from pulse_vue.files import FileLookup
from pulse_vue.helpers import camel_case
from pulse_vue.viewmodel import ViewModel

logger = logging.getLogger(__name__)

_POSITIONAL = (
	inspect.Parameter.POSITIONAL_ONLY,
	inspect.Parameter.POSITIONAL_OR_KEYWORD,
)
_DUNDER = re.compile(r"^__.*__$")

# Hooks a subclass may override that the client is allowed to call
_CALLABLE_HOOKS = frozenset({"on_created"})


@dataclass(frozen=True)
class RemoteMethod:
	"""A view-model method the client can invoke by name."""

	name: str
	parameters: tuple[ParameterSpec, ...]
	fn: Callable[..., Any]
	pre: str = ""
	post: str = ""
	watch: tuple[str, ...] = ()

	@classmethod
	def from_function(cls, name: str, fn: Callable[..., Any]) -> "RemoteMethod":
		signature = inspect.signature(fn)
		try:
			hints = get_type_hints(fn)
		except NameError as exc:
			raise TypeError(
				f"Cannot resolve annotations of method '{name}': {exc}"
			) from exc

		params: list[ParameterSpec] = []
		# First parameter is `self`
		for param in list(signature.parameters.values())[1:]:
			if param.kind is inspect.Parameter.KEYWORD_ONLY:
				if param.default is inspect.Parameter.empty:
					raise TypeError(
						f"Method '{name}' has a required keyword-only parameter '{param.name}', "
						+ "client arguments are positional"
					)
				continue
			if param.kind not in _POSITIONAL:
				continue
			annotation = hints.get(param.name, param.annotation)
			params.append(ParameterSpec.build(param.name, annotation))

		pre, post = getattr(fn, "__vue_script__", ("", ""))
		return cls(
			name=name,
			parameters=tuple(params),
			fn=fn,
			pre=pre,
			post=post,
			watch=getattr(fn, "__vue_watch__", ()),
		)

	@property
	def parameter_names(self) -> list[str]:
		return [p.name for p in self.parameters]

	def coerce(self, tokens: Sequence[Any], files: FileLookup) -> list[Any]:
		if len(tokens) < len(self.parameters):
			raise ArityMismatch(self.name, len(self.parameters), len(tokens))
		return [
			coerce_argument(token, param, files, method=self.name)
			for token, param in zip(tokens, self.parameters)
		]

	def invoke(
		self, vm: ViewModel, tokens: Sequence[Any], files: FileLookup | None = None
	) -> None:
		"""Coerce `tokens` and call the method on `vm`.

		Coercion errors propagate unchanged; anything raised by the method body
		is re-raised as MethodExecutionFailed.
		"""
		args = self.coerce(tokens, files or FileLookup.empty())
		try:
			self.fn(vm, *args)
		except Exception as exc:
			raise MethodExecutionFailed(self.name, exc) from exc


def _is_mangled(name: str) -> bool:
	# Name-mangled private members look like `_ClassName__attr`
	return name.startswith("_") and "__" in name[1:] and not name.endswith("__")


def _is_candidate(name: str, value: Any) -> bool:
	if _DUNDER.match(name) or _is_mangled(name):
		return False
	if not isinstance(value, FunctionType):
		return False
	if name in _FRAMEWORK_NAMES:
		return False
	return True


_FRAMEWORK_NAMES = frozenset(vars(ViewModel)) - _CALLABLE_HOOKS


class MethodRegistry(Mapping[str, RemoteMethod]):
	"""Client-callable methods of one view-model type, keyed by client name.

	Every method is reachable under its Python name and, when the config uses
	camelCase, under its camelCase alias. Two methods competing for the same
	key raise AmbiguousMethod when the registry is built.
	"""

	_cache: ClassVar[
		dict[tuple[type[ViewModel], SerializationConfig], "MethodRegistry"]
	] = {}
	_lock: ClassVar[threading.Lock] = threading.Lock()

	view_model: type[ViewModel]
	methods: tuple[RemoteMethod, ...]
	_by_name: dict[str, RemoteMethod]

	def __init__(
		self, view_model: type[ViewModel], config: SerializationConfig = DEFAULT_CONFIG
	) -> None:
		self.view_model = view_model
		candidates: dict[str, Any] = {}
		# Base classes first so the declaration order is stable; overrides keep
		# the position of the method they replace.
		for klass in reversed(view_model.__mro__):
			if klass is ViewModel or not issubclass(klass, ViewModel):
				continue
			for name, value in vars(klass).items():
				if _is_candidate(name, value):
					candidates[name] = value
				elif name in candidates:
					# Shadowed by something that is not a callable method
					del candidates[name]

		methods: list[RemoteMethod] = []
		by_name: dict[str, RemoteMethod] = {}
		for name, fn in candidates.items():
			if inspect.iscoroutinefunction(fn):
				logger.warning(
					"%s.%s is async and cannot be called from the client",
					view_model.__name__,
					name,
				)
				continue
			method = RemoteMethod.from_function(name, fn)
			methods.append(method)
			keys = {name}
			if config.camel_case:
				keys.add(camel_case(name))
			for key in keys:
				existing = by_name.get(key)
				if existing is not None and existing is not method:
					raise AmbiguousMethod(
						f"{view_model.__name__}: methods '{existing.name}' and '{name}' "
						+ f"are both reachable as '{key}'"
					)
				by_name[key] = method

		self.methods = tuple(methods)
		self._by_name = by_name

	@classmethod
	def for_type(
		cls, view_model: type[ViewModel], config: SerializationConfig = DEFAULT_CONFIG
	) -> "MethodRegistry":
		key = (view_model, config)
		registry = cls._cache.get(key)
		if registry is not None:
			return registry
		with cls._lock:
			registry = cls._cache.get(key)
			if registry is None:
				registry = cls(view_model, config)
				cls._cache[key] = registry
		return registry

	def resolve(self, name: str) -> RemoteMethod:
		method = self._by_name.get(name)
		if method is None:
			raise MethodNotFound(name, self.view_model.__name__)
		return method

	@override
	def __getitem__(self, name: str) -> RemoteMethod:
		return self._by_name[name]

	@override
	def __iter__(self) -> Iterator[str]:
		return iter(self._by_name)

	@override
	def __len__(self) -> int:
		return len(self._by_name)

	@override
	def __repr__(self) -> str:
		names = ", ".join(m.name for m in self.methods)
		return f"<MethodRegistry {self.view_model.__name__}: {names}>"


def resolve(
	view_model: type[ViewModel],
	name: str,
	config: SerializationConfig = DEFAULT_CONFIG,
) -> RemoteMethod:
	return MethodRegistry.for_type(view_model, config).resolve(name)


__all__ = ["MethodRegistry", "RemoteMethod", "resolve"]
