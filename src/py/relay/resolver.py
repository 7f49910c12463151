import os
import stat
from enum import Enum
from pathlib import Path
from typing import NamedTuple
from urllib.parse import unquote_to_bytes

from .config import RelayConfig
from .utils.logging import debug, logged


class EntryKind(Enum):
	File = "file"
	Directory = "directory"
	NotFound = "notfound"


class ResolvedEntry(NamedTuple):
	"""The result of mapping a request path onto the filesystem. Entries are
	computed for each request and never cached."""

	kind: EntryKind
	requestPath: str
	path: Path | None = None
	size: int | None = None
	mtime: float | None = None
	extension: str | None = None

	@property
	def isFile(self) -> bool:
		return self.kind is EntryKind.File

	@property
	def isDirectory(self) -> bool:
		return self.kind is EntryKind.Directory

	@property
	def isNotFound(self) -> bool:
		return self.kind is EntryKind.NotFound


class PathResolver:
	"""Turns request URIs into entries confined to the served root. The
	resolver never raises: anything that goes wrong is reported as not found,
	including paths that escape the root through symlinks."""

	def __init__(self, config: RelayConfig):
		self.root: Path = config.root
		self.indexFiles: tuple[str, ...] = config.indexFiles

	@staticmethod
	def Decode(uri: str) -> str:
		"""Percent-decodes the URI as UTF-8, returning it unchanged when the
		decoded bytes are not valid UTF-8."""
		try:
			return unquote_to_bytes(uri).decode("utf8")
		except UnicodeDecodeError:
			return uri

	@classmethod
	def Sanitize(cls, uri: str) -> str:
		"""Returns the request path for the given URI: absolute, without
		traversal segments, null bytes or trailing slash."""
		path = cls.Decode(uri)
		if ".." in path or "//" in path:
			return "/"
		path = path.replace("\0", "")
		if not path.startswith("/"):
			path = f"/{path}"
		if len(path) > 1 and path.endswith("/"):
			path = path[:-1]
		return path

	def contains(self, path: str | Path) -> bool:
		parts = self.root.parts
		return Path(path).parts[: len(parts)] == parts

	def resolve(self, uri: str) -> ResolvedEntry:
		path = self.Sanitize(uri)
		try:
			return self.resolvePath(path)
		except (OSError, ValueError) as e:
			logged(debug) and debug("Resolution failed", Path=path, Error=str(e))
			return ResolvedEntry(EntryKind.NotFound, path)

	def resolvePath(self, path: str) -> ResolvedEntry:
		real = os.path.realpath(os.path.join(self.root, path.lstrip("/")))
		if not self.contains(real):
			logged(debug) and debug("Path escapes root", Path=path)
			return ResolvedEntry(EntryKind.NotFound, path)
		st = os.stat(real)
		if stat.S_ISDIR(st.st_mode):
			for name in self.indexFiles:
				if index := self.file(path, os.path.join(real, name)):
					return index
			return ResolvedEntry(
				EntryKind.Directory, path, Path(real), mtime=st.st_mtime
			)
		elif stat.S_ISREG(st.st_mode):
			return self.entry(path, real, st)
		else:
			return ResolvedEntry(EntryKind.NotFound, path)

	def file(self, path: str, candidate: str) -> ResolvedEntry | None:
		"""Returns a file entry for the candidate if it is a regular file
		within the root."""
		real = os.path.realpath(candidate)
		if not self.contains(real):
			return None
		try:
			st = os.stat(real)
		except OSError:
			return None
		return self.entry(path, real, st) if stat.S_ISREG(st.st_mode) else None

	def entry(self, path: str, real: str, st: os.stat_result) -> ResolvedEntry:
		ext = os.path.splitext(real)[1]
		return ResolvedEntry(
			EntryKind.File,
			path,
			Path(real),
			size=st.st_size,
			mtime=st.st_mtime,
			extension=ext[1:].lower() if ext else None,
		)


# EOF
