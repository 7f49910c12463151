import os
import posixpath
import stat
from datetime import datetime
from pathlib import Path
from typing import NamedTuple
from urllib.parse import quote

from .templates import listingPage
from .utils.htmpl import H, Node
from .utils.logging import debug, logged

SIZE_UNITS: tuple[str, ...] = ("B", "KB", "MB", "GB", "TB")

FOLDER_ICON: str = "📁"
DEFAULT_ICON: str = "📄"
FILE_ICONS: dict[str, str] = {
	"html": "🌐",
	"htm": "🌐",
	"css": "🎨",
	"js": "📜",
	"json": "📋",
	"png": "🖼",
	"jpg": "🖼",
	"jpeg": "🖼",
	"gif": "🖼",
	"svg": "🖼",
	"webp": "🖼",
	"txt": "📄",
	"md": "📄",
	"pdf": "📕",
	"zip": "📦",
	"tar": "📦",
	"gz": "📦",
	"mp3": "🎵",
	"wav": "🎵",
	"m4a": "🎵",
	"mp4": "🎬",
	"mov": "🎬",
	"avi": "🎬",
	"swift": "🦉",
	"py": "🐍",
}


class DirectoryItem(NamedTuple):
	name: str
	isDirectory: bool
	size: str
	modified: str


def formatSize(size: int) -> str:
	"""Formats a size in bytes using binary prefixes, like `1.5 KB`."""
	value: float = float(size)
	unit: int = 0
	while value >= 1024 and unit < len(SIZE_UNITS) - 1:
		value /= 1024
		unit += 1
	return f"{size} B" if unit == 0 else f"{value:.1f} {SIZE_UNITS[unit]}"


def formatTime(mtime: float) -> str:
	"""Formats a modification time in local time, like `Mar 4, 2025, 14:05`."""
	t = datetime.fromtimestamp(mtime)
	return f"{t:%b} {t.day}, {t:%Y}, {t:%H:%M}"


def fileIcon(name: str, isDirectory: bool = False) -> str:
	if isDirectory:
		return FOLDER_ICON
	ext = os.path.splitext(name)[1][1:].lower()
	return FILE_ICONS.get(ext, DEFAULT_ICON)


class DirectoryRenderer:
	"""Renders HTML listings for directories that have no index file."""

	def listDirectory(self, path: Path | str) -> list[DirectoryItem]:
		"""Lists the entries of the directory sorted case-insensitively. The
		directory itself must be readable, while entries that can't be
		stat-ed are skipped."""
		items: list[DirectoryItem] = []
		with os.scandir(path) as entries:
			for entry in entries:
				try:
					# Follows symlinks, so that a link to a directory is
					# listed as a directory.
					st = entry.stat()
				except OSError as e:
					logged(debug) and debug(
						"Skipping entry", Path=entry.path, Error=str(e)
					)
					continue
				is_dir = stat.S_ISDIR(st.st_mode)
				items.append(
					DirectoryItem(
						name=entry.name,
						isDirectory=is_dir,
						size="-" if is_dir else formatSize(st.st_size),
						modified=formatTime(st.st_mtime),
					)
				)
		return sorted(items, key=lambda _: (_.name.lower(), _.name))

	def row(self, item: DirectoryItem, requestPath: str) -> Node:
		suffix: str = "/" if item.isDirectory else ""
		base: str = "" if requestPath == "/" else quote(requestPath)
		return H.tr(
			H.td(
				H.span(fileIcon(item.name, item.isDirectory), _="icon"),
				" ",
				H.a(f"{item.name}{suffix}", href=f"{base}/{quote(item.name)}{suffix}"),
			),
			H.td(item.size, _="size"),
			H.td(item.modified, _="modified"),
		)

	def parentRow(self, requestPath: str) -> Node:
		parent: str = posixpath.dirname(requestPath.rstrip("/"))
		href: str = "/" if parent in ("", "/") else f"{quote(parent)}/"
		return H.tr(H.td(H.a("../", href=href), colspan="3"))

	def render(self, items: list[DirectoryItem], requestPath: str) -> str:
		"""Renders the listing page for the given items, which are sorted
		case-insensitively regardless of the order they are given in."""
		rows: list[Node] = [] if requestPath == "/" else [self.parentRow(requestPath)]
		rows += [
			self.row(_, requestPath)
			for _ in sorted(items, key=lambda _: (_.name.lower(), _.name))
		]
		return listingPage(f"Index of {requestPath}", rows)


# EOF
