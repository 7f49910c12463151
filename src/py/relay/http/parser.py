from enum import Enum
from typing import Iterator

from ..utils.io import LineParser
from .model import (
	HTTPAtom,
	HTTPBodyBlob,
	HTTPHeaders,
	HTTPProcessingStatus,
	HTTPRequest,
	HTTPRequestLine,
	headername,
)

# First byte of a TLS record carrying a handshake
TLS_HANDSHAKE: int = 0x16


class ParserState(Enum):
	RequestLine = 0
	Headers = 1
	Body = 2


def decodeTarget(target: bytes) -> str:
	"""Decodes the request target. Raw non-ASCII bytes are taken as UTF-8,
	as sent by clients like curl, falling back to latin-1."""
	try:
		return target.decode("utf8")
	except UnicodeDecodeError:
		return target.decode("latin-1")


def parseRequestLine(line: bytes) -> HTTPRequestLine | None:
	"""Parses `METHOD TARGET PROTOCOL`, splitting the query from the
	target. Returns `None` when the line is not a request line."""
	i: int = line.find(b" ")
	j: int = line.rfind(b" ")
	if i <= 0 or i == j:
		return None
	path, _, query = decodeTarget(line[i + 1 : j]).partition("?")
	return HTTPRequestLine(
		line[:i].decode("latin-1"), path, query, line[j + 1 :].decode("latin-1")
	)


class HTTPParser:
	"""A stateful, incremental HTTP request parser. Chunks are fed as they
	are received and the parser yields atoms as they are complete: the
	request line, the headers, `HTTPProcessingStatus.Body` when a body is
	expected and finally the `HTTPRequest`. Bodies are only supported when
	they have a `Content-Length`."""

	def __init__(self) -> None:
		self.lines: LineParser = LineParser()
		self.state: ParserState = ParserState.RequestLine
		self.requestLine: HTTPRequestLine | None = None
		self.headers: dict[str, str] = {}
		self.contentType: str | None = None
		self.contentLength: int | None = None
		self.body: list[bytes] = []
		self.remaining: int = 0
		# Bytes left to skip from a TLS record
		self.skipping: int = 0

	def reset(self) -> "HTTPParser":
		self.lines.reset()
		self.state = ParserState.RequestLine
		self.requestLine = None
		self.headers = {}
		self.contentType = None
		self.contentLength = None
		self.body = []
		self.remaining = 0
		return self

	def request(self) -> HTTPRequest:
		line = self.requestLine
		if line is None:
			raise RuntimeError("Request has no request line")
		body = b"".join(self.body)
		res = HTTPRequest(
			method=line.method,
			path=line.path,
			query=line.query,
			headers=HTTPHeaders(self.headers, self.contentType, self.contentLength),
			body=HTTPBodyBlob.FromBytes(body),
			protocol=line.protocol,
		)
		self.reset()
		return res

	def header(self, line: bytes) -> None:
		text: str = line.decode("latin-1")
		name, sep, value = text.partition(":")
		if not sep:
			return
		name = headername(name.strip())
		value = value.strip()
		if name == "Content-Length":
			try:
				self.contentLength = max(0, int(value))
			except ValueError:
				self.contentLength = None
		elif name == "Content-Type":
			self.contentType = value
		self.headers[name] = value

	def skipTLS(self, chunk: bytes, offset: int) -> int:
		"""Returns how many bytes of a TLS record to skip, as we don't
		support TLS."""
		available: int = len(chunk) - offset
		if self.skipping:
			read = min(available, self.skipping)
			self.skipping -= read
			return read
		elif (
			self.state is ParserState.RequestLine
			and not self.lines.buffer
			and available >= 5
			and chunk[offset] == TLS_HANDSHAKE
		):
			size: int = 5 + (chunk[offset + 3] << 8) + chunk[offset + 4]
			read = min(available, size)
			self.skipping = size - read
			return read
		else:
			return 0

	def feed(self, chunk: bytes) -> Iterator[HTTPAtom]:
		size: int = len(chunk)
		offset: int = 0
		while offset < size:
			if skipped := self.skipTLS(chunk, offset):
				offset += skipped
			elif self.state is ParserState.Body:
				read = min(size - offset, self.remaining)
				self.body.append(chunk[offset : offset + read])
				self.remaining -= read
				offset += read
				if not self.remaining:
					yield self.request()
			else:
				line, read = self.lines.feed(chunk, offset)
				offset += read
				if line is None:
					continue
				elif self.state is ParserState.RequestLine:
					# Empty or malformed lines before a request are ignored
					if line and (requestLine := parseRequestLine(line)):
						self.requestLine = requestLine
						self.state = ParserState.Headers
						yield requestLine
				elif line:
					self.header(line)
				else:
					yield HTTPHeaders(self.headers, self.contentType, self.contentLength)
					if self.contentLength:
						self.state = ParserState.Body
						self.remaining = self.contentLength
						yield HTTPProcessingStatus.Body
					else:
						yield self.request()


# EOF
