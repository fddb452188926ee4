"""Resolved shape of a component, used to emit its client descriptor.

A definition combines the component content (a `.vue`-style file with
`<template>`, `<style>` and `<script>` blocks) with what the view-model class
declares: props, client-only fields, methods and their client fragments,
computed expressions, watchers and mixins.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Protocol

from pulse_vue.config import DEFAULT_CONFIG, SerializationConfig
from pulse_vue.errors import DefinitionError
from pulse_vue.methods import MethodRegistry
from pulse_vue.viewmodel import ComputedExpression, ViewModel

logger = logging.getLogger(__name__)

_TEMPLATE_OPEN = re.compile(r"<template\b[^>]*>", re.IGNORECASE)
_TEMPLATE_CLOSE = "</template>"
_BLOCK = re.compile(
	r"<(?P<tag>style|script)\b[^>]*>(?P<body>.*?)</(?P=tag)\s*>",
	re.IGNORECASE | re.DOTALL,
)


@dataclass(frozen=True)
class MethodDefinition:
	pre: str = ""
	post: str = ""
	parameters: tuple[str, ...] = ()


@dataclass
class ComponentDefinition:
	props: list[str] = field(default_factory=list)
	created_hook: bool = False
	template: str = ""
	data: dict[str, Any] = field(default_factory=dict)
	methods: dict[str, MethodDefinition] = field(default_factory=dict)
	computed: dict[str, str] = field(default_factory=dict)
	watch: dict[str, str] = field(default_factory=dict)
	scripts: list[str] = field(default_factory=list)
	styles: list[str] = field(default_factory=list)
	locals: list[str] = field(default_factory=list)


class DefinitionProvider(Protocol):
	def __call__(
		self,
		view_model: type[ViewModel],
		content: str,
		config: SerializationConfig,
	) -> ComponentDefinition: ...


def split_content(content: str) -> tuple[str, list[str], list[str]]:
	"""Split component content into (template, styles, scripts).

	The template spans from the first `<template>` tag to the last
	`</template>`, so nested `<template>` elements are kept intact.
	"""
	opening = _TEMPLATE_OPEN.search(content)
	closing = content.lower().rfind(_TEMPLATE_CLOSE)
	if opening is None or closing < opening.end():
		raise DefinitionError("Component content has no <template> block")
	template = content[opening.end() : closing].strip()
	rest = content[: opening.start()] + content[closing + len(_TEMPLATE_CLOSE) :]

	styles: list[str] = []
	scripts: list[str] = []
	for match in _BLOCK.finditer(rest):
		body = match.group("body").strip()
		if not body:
			continue
		if match.group("tag").lower() == "style":
			styles.append(body)
		else:
			scripts.append(body)
	return template, styles, scripts


def _computed_expressions(view_model: type[ViewModel]) -> dict[str, str]:
	result: dict[str, str] = {}
	for klass in reversed(view_model.__mro__):
		for name, value in vars(klass).items():
			if isinstance(value, ComputedExpression):
				result[name] = value.expression
	return result


def parse_definition(
	view_model: type[ViewModel],
	content: str,
	config: SerializationConfig = DEFAULT_CONFIG,
) -> ComponentDefinition:
	"""Default definition provider."""
	template, styles, scripts = split_content(content)
	registry = MethodRegistry.for_type(view_model, config)
	fields = view_model.fields()

	with view_model() as initial:
		state = initial.to_json(config, include_local=True)
	prop_names = {f.json_name(config) for f in fields if f.prop}

	methods: dict[str, MethodDefinition] = {}
	watch: dict[str, str] = {}
	for method in registry.methods:
		methods[method.name] = MethodDefinition(
			pre=method.pre,
			post=method.post,
			parameters=tuple(method.parameter_names),
		)
		for watched in method.watch:
			if watched in watch:
				raise DefinitionError(
					f"{view_model.__name__}: field '{watched}' is watched by both "
					+ f"'{watch[watched]}' and '{method.name}'"
				)
			watch[watched] = method.name

	definition = ComponentDefinition(
		props=[f.name for f in fields if f.prop],
		created_hook="on_created" in registry,
		template=template,
		data={k: v for k, v in state.items() if k not in prop_names},
		methods=methods,
		computed=_computed_expressions(view_model),
		watch=watch,
		scripts=[*view_model.__vue_mixins__, *scripts],
		styles=styles,
		locals=[f.name for f in fields if f.local],
	)
	logger.debug(
		"Parsed definition of %s: %d method(s), %d prop(s)",
		view_model.__name__,
		len(methods),
		len(definition.props),
	)
	return definition


__all__ = [
	"ComponentDefinition",
	"DefinitionProvider",
	"MethodDefinition",
	"parse_definition",
	"split_content",
]
