from typing import Any

from pulse_vue.config import DEFAULT_CONFIG, SerializationConfig
from pulse_vue.json_compare import json_equal


def merge_json(
	target: dict[str, Any],
	source: dict[str, Any],
	config: SerializationConfig = DEFAULT_CONFIG,
) -> dict[str, Any]:
	"""Merge `source` into `target` in place and return `target`.

	Nested objects merge key by key. Arrays follow `config.merge_arrays`,
	scalars are replaced, and nulls replace existing values only when
	`config.merge_nulls` is set.
	"""
	for key, incoming in source.items():
		if incoming is None:
			if config.merge_nulls or key not in target:
				target[key] = None
			continue

		existing = target.get(key)
		if isinstance(incoming, dict) and isinstance(existing, dict):
			merge_json(existing, incoming, config)
		elif isinstance(incoming, list) and isinstance(existing, list):
			target[key] = _merge_arrays(existing, incoming, config)
		else:
			target[key] = incoming
	return target


def _merge_arrays(
	existing: list[Any], incoming: list[Any], config: SerializationConfig
) -> list[Any]:
	if config.merge_arrays == "concat":
		return [*existing, *incoming]
	if config.merge_arrays == "union":
		merged = list(existing)
		for item in incoming:
			if not any(json_equal(item, other) for other in merged):
				merged.append(item)
		return merged
	return list(incoming)


__all__ = ["merge_json"]
