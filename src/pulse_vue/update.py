"""
One component update cycle.

The client posts its last known `data`, the parent's `props`, a method name and
positional arguments. The server rebuilds a fresh view-model from that payload,
runs the method and answers with the fields that changed plus any client script
the method queued:

    reconstruct -> snapshot original -> absorb request -> dispatch
    -> snapshot current -> diff -> emit, then dispose (always)

Nothing survives between cycles; every request carries the full state.
"""

import copy
import json
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, TypedDict

from pulse_vue.config import DEFAULT_CONFIG, SerializationConfig
from pulse_vue.errors import MalformedRequest
from pulse_vue.files import FileLookup
from pulse_vue.helpers import is_empty_container
from pulse_vue.json_compare import json_equal
from pulse_vue.merge import merge_json
from pulse_vue.methods import MethodRegistry
from pulse_vue.viewmodel import ViewModel

logger = logging.getLogger(__name__)

JSONObject = dict[str, Any]


class UpdateResponse(TypedDict):
	update: JSONObject
	script: str


@dataclass(frozen=True)
class UpdateRequest:
	"""Inputs of one update cycle.

	`data` and `props` may be JSON text or already decoded objects, `parameters`
	may be JSON text or a decoded array. An empty `method` only resynchronises
	state without calling anything.
	"""

	data: Mapping[str, Any] | str | None = None
	props: Mapping[str, Any] | str | None = None
	method: str = ""
	parameters: Sequence[Any] | str = field(default_factory=list)

	def payload(self, config: SerializationConfig = DEFAULT_CONFIG) -> JSONObject:
		"""Merge `props` over `data` into a fresh JSON object."""
		merged = _json_object(self.data, "data")
		return merge_json(merged, _json_object(self.props, "props"), config)

	def tokens(self) -> list[Any]:
		raw: Any = self.parameters
		if isinstance(raw, str):
			raw = load_json(raw, "parameters") if raw.strip() else []
		if not isinstance(raw, Sequence) or isinstance(raw, (str, bytes)):
			raise MalformedRequest(
				f"'parameters' must be a JSON array, got {type(raw).__name__}"
			)
		return list(raw)


def _reject_constant(token: str) -> Any:
	raise ValueError(f"{token} is not a JSON value")


def load_json(text: str | bytes, name: str) -> Any:
	"""Decode JSON request input, rejecting the `NaN` and `Infinity` extensions."""
	try:
		return json.loads(text, parse_constant=_reject_constant)
	except json.JSONDecodeError as exc:
		raise MalformedRequest(f"'{name}' is not valid JSON: {exc.msg}") from exc
	except ValueError as exc:
		raise MalformedRequest(f"'{name}' is not valid JSON: {exc}") from exc


def _json_object(raw: Mapping[str, Any] | str | None, name: str) -> JSONObject:
	if raw is None:
		return {}
	if isinstance(raw, str):
		if not raw.strip():
			return {}
		raw = load_json(raw, name)
	if not isinstance(raw, Mapping):
		raise MalformedRequest(
			f"'{name}' must be a JSON object, got {type(raw).__name__}"
		)
	return copy.deepcopy(dict(raw))


def diff(original: Mapping[str, Any], current: Mapping[str, Any]) -> JSONObject:
	"""Return the entries of `current` that differ from `original`.

	A key missing from `original` is skipped when its current value is an empty
	object or array; those are defaults the client never had.
	"""
	patch: JSONObject = {}
	for key, value in current.items():
		if key not in original:
			if is_empty_container(value):
				continue
			patch[key] = value
			continue
		if not json_equal(original[key], value):
			patch[key] = value
	return patch


def update_model(
	view_model: type[ViewModel],
	request: UpdateRequest,
	files: FileLookup | None = None,
	config: SerializationConfig = DEFAULT_CONFIG,
) -> UpdateResponse:
	"""Run one update cycle for `view_model` and return the patch.

	Raises MalformedRequest, MethodNotFound, ArityMismatch, InvalidArgument or
	MethodExecutionFailed; in every case the view-model (when it was built) is
	disposed exactly once before the error propagates.
	"""
	payload = request.payload(config)
	vm = view_model.from_json(payload, config)

	with vm:
		original = vm.to_json(config)

		current: JSONObject = {}
		vm.absorb(current, payload, config)

		# Parsed even for a resync so malformed parameters always fail
		tokens = request.tokens()
		if request.method:
			registry = MethodRegistry.for_type(view_model, config)
			registry.resolve(request.method).invoke(vm, tokens, files)

		# Field-by-field overwrite with the post-method state
		current.update(vm.to_json(config))

		patch = diff(original, current)
		response: UpdateResponse = {"update": patch, "script": vm.client_script()}

	logger.debug(
		"Updated %s method=%r changed=%s",
		view_model.__name__,
		request.method,
		sorted(patch),
	)
	return response


__all__ = ["UpdateRequest", "UpdateResponse", "diff", "load_json", "update_model"]
