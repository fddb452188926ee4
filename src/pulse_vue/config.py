from dataclasses import dataclass, replace
from typing import Any, Literal

from pulse_vue.helpers import camel_case

MergeArrays = Literal["replace", "concat", "union"]


@dataclass(frozen=True, slots=True)
class SerializationConfig:
	"""Process-wide JSON rules shared by snapshots, merging and argument coercion.

	Build one instance at startup and pass it explicitly. Instances are frozen;
	use `with_()` to derive a variant.

	Attributes:
		camel_case: Write top-level field names (and method aliases) in camelCase.
		merge_arrays: How `data`/`props` merging combines two arrays under the
			same key. "replace" keeps the overriding array, "concat" appends it,
			"union" appends only the items that are not already present.
		merge_nulls: Whether a null in the overriding object replaces the
			existing value. When False, nulls are skipped.
	"""

	camel_case: bool = True
	merge_arrays: MergeArrays = "replace"
	merge_nulls: bool = True

	def __post_init__(self) -> None:
		if self.merge_arrays not in ("replace", "concat", "union"):
			raise ValueError(
				f"merge_arrays must be 'replace', 'concat' or 'union', got {self.merge_arrays!r}"
			)

	def with_(self, **changes: Any) -> "SerializationConfig":
		return replace(self, **changes)

	def json_name(self, name: str) -> str:
		return camel_case(name) if self.camel_case else name


DEFAULT_CONFIG = SerializationConfig()


__all__ = ["DEFAULT_CONFIG", "MergeArrays", "SerializationConfig"]
