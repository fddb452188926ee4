from collections.abc import Mapping, Sequence
from typing import Any

from pulse_vue.config import DEFAULT_CONFIG, SerializationConfig
from pulse_vue.definition import (
	ComponentDefinition,
	DefinitionProvider,
	parse_definition,
)
from pulse_vue.files import FileLookup
from pulse_vue.methods import MethodRegistry
from pulse_vue.render import render_script
from pulse_vue.update import UpdateRequest, UpdateResponse, update_model
from pulse_vue.viewmodel import ViewModel


class Component:
	"""A view-model type bound to its component content and virtual path.

	Building a Component builds the view-model's method registry, so naming
	conflicts surface at startup instead of on the first request.
	"""

	view_model: type[ViewModel]
	content: str
	vpath: str
	config: SerializationConfig
	registry: MethodRegistry
	_provider: DefinitionProvider
	_definition: ComponentDefinition | None

	def __init__(
		self,
		view_model: type[ViewModel],
		content: str,
		vpath: str,
		*,
		config: SerializationConfig = DEFAULT_CONFIG,
		provider: DefinitionProvider = parse_definition,
	) -> None:
		if not (isinstance(view_model, type) and issubclass(view_model, ViewModel)):
			raise TypeError(f"{view_model!r} is not a ViewModel subclass")
		self.view_model = view_model
		self.content = content
		self.vpath = vpath
		self.config = config
		self.registry = MethodRegistry.for_type(view_model, config)
		self._provider = provider
		self._definition = None

	def definition(self) -> ComponentDefinition:
		if self._definition is None:
			self._definition = self._provider(self.view_model, self.content, self.config)
		return self._definition

	def render_script(self) -> str:
		return render_script(self.definition(), self.vpath, self.config)

	def update_model(
		self,
		data: Mapping[str, Any] | str | None,
		props: Mapping[str, Any] | str | None,
		method: str = "",
		parameters: Sequence[Any] | str = (),
		files: FileLookup | None = None,
	) -> UpdateResponse:
		request = UpdateRequest(
			data=data, props=props, method=method, parameters=parameters
		)
		return update_model(self.view_model, request, files, self.config)

	def __repr__(self) -> str:
		return f"Component({self.vpath!r}, {self.view_model.__name__})"


__all__ = ["Component"]
