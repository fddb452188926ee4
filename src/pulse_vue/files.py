from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType

from fastapi import UploadFile
from starlette.datastructures import FormData
from starlette.datastructures import UploadFile as StarletteUploadFile


class FileLookup(Mapping[str, tuple[StarletteUploadFile, ...]]):
	"""Read-only lookup from an upload slot name to its ordered file handles.

	Owned by the transport layer for the duration of one method invocation.
	"""

	__slots__: tuple[str, ...] = ("_slots",)
	_slots: Mapping[str, tuple[StarletteUploadFile, ...]]

	def __init__(
		self,
		slots: Mapping[str, Iterable[StarletteUploadFile]] | None = None,
	) -> None:
		frozen = {name: tuple(files) for name, files in (slots or {}).items()}
		self._slots = MappingProxyType(frozen)

	@classmethod
	def empty(cls) -> FileLookup:
		return cls()

	@classmethod
	def from_form(cls, form: FormData, exclude: Iterable[str] = ()) -> FileLookup:
		"""Collect every uploaded file in `form`, keeping duplicate keys in order."""
		skipped = set(exclude)
		slots: dict[str, list[StarletteUploadFile]] = {}
		# multi_items() preserves duplicates while decoding percent-encoded keys
		for key, value in form.multi_items():
			if key in skipped or not isinstance(value, StarletteUploadFile):
				continue
			slots.setdefault(key, []).append(value)
		return cls(slots)

	def get_multiple(self, name: str) -> tuple[StarletteUploadFile, ...]:
		return self._slots.get(name, ())

	def first(self, name: str) -> StarletteUploadFile | None:
		files = self._slots.get(name)
		if not files:
			return None
		return files[0]

	def __getitem__(self, name: str) -> tuple[StarletteUploadFile, ...]:
		return self._slots[name]

	def __iter__(self) -> Iterator[str]:
		return iter(self._slots)

	def __len__(self) -> int:
		return len(self._slots)

	def __repr__(self) -> str:
		counts = ", ".join(f"{name}={len(files)}" for name, files in self._slots.items())
		return f"FileLookup({counts})"


__all__ = ["FileLookup", "StarletteUploadFile", "UploadFile"]
