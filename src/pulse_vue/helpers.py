import re
from abc import ABC, abstractmethod
from typing import Any

_SNAKE_SEGMENT = re.compile(r"_+([a-zA-Z0-9])")


class Disposable(ABC):
	__disposed__: bool = False

	@abstractmethod
	def dispose(self) -> None: ...


def camel_case(name: str) -> str:
	"""Convert a Python identifier to the camelCase name used on the client.

	Leading underscores are kept so protected members stay recognisable:

	    camel_case("set_status") == "setStatus"
	    camel_case("_reset_form") == "_resetForm"
	    camel_case("setStatus") == "setStatus"
	"""
	stripped = name.lstrip("_")
	prefix = name[: len(name) - len(stripped)]
	if not stripped:
		return name
	converted = _SNAKE_SEGMENT.sub(lambda m: m.group(1).upper(), stripped)
	return prefix + converted[0].lower() + converted[1:]


def is_empty_container(value: Any) -> bool:
	return isinstance(value, (dict, list)) and len(value) == 0


__all__ = ["Disposable", "camel_case", "is_empty_container"]
