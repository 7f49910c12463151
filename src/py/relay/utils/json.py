from typing import Any, TypeAlias, cast
import json as basejson

TJSON: TypeAlias = None | int | float | bool | str | list[Any] | dict[str, Any]


def json(value: Any) -> bytes:
	"""Converts the value to compact UTF-8 encoded JSON."""
	return basejson.dumps(value, separators=(",", ":")).encode("utf8")


def unjson(value: bytes | str) -> TJSON:
	"""Parses JSON-encoded text."""
	return cast(TJSON, basejson.loads(value))


# EOF
