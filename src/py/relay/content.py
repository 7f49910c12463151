import codecs
from pathlib import Path

from .config import SNIFF_SAMPLE_SIZE, SNIFF_TEXT_THRESHOLD
from .utils.logging import debug, logged

TEXT_PLAIN: str = "text/plain; charset=utf-8"
BINARY: str = "application/octet-stream"

MIME_TYPES: dict[str, str] = {
	"html": "text/html; charset=utf-8",
	"htm": "text/html; charset=utf-8",
	"css": "text/css; charset=utf-8",
	"js": "application/javascript; charset=utf-8",
	"mjs": "application/javascript; charset=utf-8",
	"jsx": "application/javascript; charset=utf-8",
	"ts": "application/javascript; charset=utf-8",
	"tsx": "application/javascript; charset=utf-8",
	"json": "application/json; charset=utf-8",
	"png": "image/png",
	"jpg": "image/jpeg",
	"jpeg": "image/jpeg",
	"gif": "image/gif",
	"svg": "image/svg+xml",
	"ico": "image/x-icon",
	"webp": "image/webp",
	"txt": TEXT_PLAIN,
	"text": TEXT_PLAIN,
	"xml": "application/xml; charset=utf-8",
	"pdf": "application/pdf",
	"zip": "application/zip",
	"woff": "font/woff",
	"woff2": "font/woff2",
	"ttf": "font/ttf",
	"otf": "font/otf",
}

# Source code, configuration and markup formats are shown as plain text
# in the browser rather than downloaded.
for _ in (
	"swift py rb go rs java c cpp h hpp cs php sh bash zsh fish "
	"md markdown yml yaml toml ini cfg conf env "
	"vue svelte astro"
).split():
	MIME_TYPES[_] = TEXT_PLAIN

BINARY_SIGNATURES: tuple[bytes, ...] = (
	b"\x89PNG",  # PNG
	b"\xff\xd8\xff",  # JPEG
	b"GIF",  # GIF
	b"%PDF",  # PDF
	b"PK",  # ZIP
	b"\x7fELF",  # ELF
	b"\xcf\xfa\xed\xfe",  # Mach-O 64
	b"\xce\xfa\xed\xfe",  # Mach-O 32
	b"\xca\xfe\xba\xbe",  # Mach-O fat
)

# Printable ASCII, plus tab, line feed and carriage return
TEXT_BYTES: frozenset[int] = frozenset(range(32, 127)) | {9, 10, 13}


def isBinarySignature(sample: bytes) -> bool:
	return any(sample.startswith(_) for _ in BINARY_SIGNATURES)


def isUTF8(sample: bytes) -> bool:
	"""Tells if the sample is valid UTF-8. A multi-byte sequence cut by the
	end of the sample is accepted."""
	try:
		codecs.getincrementaldecoder("utf8")().decode(sample, final=False)
		return True
	except UnicodeDecodeError:
		return False


def isTextual(contentType: str) -> bool:
	return contentType.startswith("text/") or "charset=" in contentType


class ContentTyper:
	"""Maps files to MIME types, first by extension and then, for unknown
	extensions, by sniffing the start of the file."""

	def __init__(
		self,
		sampleSize: int = SNIFF_SAMPLE_SIZE,
		textThreshold: float = SNIFF_TEXT_THRESHOLD,
	):
		self.sampleSize: int = sampleSize
		self.textThreshold: float = textThreshold

	def sample(self, path: Path | str) -> bytes | None:
		try:
			with open(path, "rb") as f:
				return f.read(self.sampleSize)
		except OSError as e:
			logged(debug) and debug("Could not sample file", Path=str(path), Error=str(e))
			return None

	def isText(self, sample: bytes) -> bool:
		if not sample:
			return False
		elif isUTF8(sample):
			return True
		elif isBinarySignature(sample):
			return False
		else:
			other = sum(1 for _ in sample if _ not in TEXT_BYTES)
			return other / len(sample) < self.textThreshold

	def sniff(self, path: Path | str, sample: bytes | None = None) -> str:
		if sample is None:
			sample = self.sample(path)
		if sample is None:
			return BINARY
		return TEXT_PLAIN if self.isText(sample) else BINARY

	def classify(
		self,
		path: Path | str,
		extension: str | None = None,
		content: bytes | None = None,
	) -> str:
		"""Returns the MIME type of the file at the given path. The extension
		defaults to the path's own suffix. When the file's `content` is
		given, it is sampled instead of reading the file again."""
		sample: bytes | None = None if content is None else content[: self.sampleSize]
		if extension is None:
			suffix = Path(path).suffix
			extension = suffix[1:] if suffix else None
		mime: str | None = MIME_TYPES.get(extension.lower()) if extension else None
		if mime is None:
			return self.sniff(path, sample)
		elif isTextual(mime):
			# A binary file with a text extension is still binary
			if sample is None:
				sample = self.sample(path)
			if sample and not isUTF8(sample) and isBinarySignature(sample):
				return BINARY
		return mime


# EOF
