"""Structural comparison of JSON-shaped values.

`compare` is a total order over decoded JSON (None, bool, int, float, str,
list and dict). Objects compare independently of key order, numbers compare by
value so `1` and `1.0` are equal, and booleans are never treated as numbers.
NaN equals only itself and sorts below every other number.
"""

import math
from collections.abc import Mapping, Sequence
from functools import cmp_to_key
from typing import Any, Literal

Ordering = Literal[-1, 0, 1]

_RANK_NULL = 0
_RANK_BOOL = 1
_RANK_NUMBER = 2
_RANK_STRING = 3
_RANK_ARRAY = 4
_RANK_OBJECT = 5


def _rank(value: Any) -> int:
	if value is None:
		return _RANK_NULL
	# bool is a subclass of int, check it first
	if isinstance(value, bool):
		return _RANK_BOOL
	if isinstance(value, (int, float)):
		return _RANK_NUMBER
	if isinstance(value, str):
		return _RANK_STRING
	if isinstance(value, Mapping):
		return _RANK_OBJECT
	if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
		return _RANK_ARRAY
	raise TypeError(f"Not a JSON value: {type(value)!r}")


def _sign(a: Any, b: Any) -> Ordering:
	if a < b:
		return -1
	if a > b:
		return 1
	return 0


def _compare_numbers(a: float, b: float) -> Ordering:
	# NaN equals only NaN and sorts below every other number
	a_nan = isinstance(a, float) and math.isnan(a)
	b_nan = isinstance(b, float) and math.isnan(b)
	if a_nan or b_nan:
		return _sign(not a_nan, not b_nan)
	return _sign(a, b)


def compare(a: Any, b: Any) -> Ordering:
	"""Return -1, 0 or 1 ordering `a` relative to `b`."""
	rank_a = _rank(a)
	rank_b = _rank(b)
	if rank_a != rank_b:
		return _sign(rank_a, rank_b)

	if rank_a == _RANK_NULL:
		return 0
	if rank_a == _RANK_NUMBER:
		return _compare_numbers(a, b)
	if rank_a in (_RANK_BOOL, _RANK_STRING):
		return _sign(a, b)

	if rank_a == _RANK_ARRAY:
		for left, right in zip(a, b):
			result = compare(left, right)
			if result != 0:
				return result
		return _sign(len(a), len(b))

	keys_a = sorted(a.keys())
	keys_b = sorted(b.keys())
	if keys_a != keys_b:
		return _sign(keys_a, keys_b)
	for key in keys_a:
		result = compare(a[key], b[key])
		if result != 0:
			return result
	return 0


def json_equal(a: Any, b: Any) -> bool:
	return compare(a, b) == 0


json_sort_key = cmp_to_key(compare)


__all__ = ["Ordering", "compare", "json_equal", "json_sort_key"]
