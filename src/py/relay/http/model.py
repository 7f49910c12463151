from enum import Enum
from typing import NamedTuple, TypeAlias, Union
from urllib.parse import parse_qsl

from ..config import DEFAULT_ENCODING
from .status import HTTP_STATUS

# -----------------------------------------------------------------------------
#
# HELPERS
#
# -----------------------------------------------------------------------------


def headername(name: str, *, headers: dict[str, str] = {}) -> str:
	"""Normalizes the header name as `Kebab-Case`."""
	if name in headers:
		return headers[name]
	key: str = name.lower()
	if key in headers:
		return headers[key]
	else:
		normalized: str = "-".join(_.capitalize() for _ in name.split("-"))
		headers[key] = normalized
		return normalized


# -----------------------------------------------------------------------------
#
# DATA MODEL
#
# -----------------------------------------------------------------------------


class HTTPRequestLine(NamedTuple):
	"""Represents a request status line"""

	method: str
	path: str
	query: str
	protocol: str


class HTTPHeaders(NamedTuple):
	"""Wraps HTTP headers, keeping key information for response/request processing."""

	headers: dict[str, str]
	contentType: str | None = None
	contentLength: int | None = None


class HTTPProcessingStatus(Enum):
	"""Internal parser/processor state management"""

	Processing = 0
	Body = 1
	Complete = 2
	Timeout = 10
	NoData = 11
	BadFormat = 12


class HTTPBodyBlob(NamedTuple):
	"""Represents a whole body as bytes."""

	payload: bytes = b""
	length: int = 0

	@staticmethod
	def FromBytes(data: bytes) -> "HTTPBodyBlob":
		return HTTPBodyBlob(payload=data, length=len(data))


# Type alias for what the parser produces
HTTPAtom: TypeAlias = Union[
	HTTPRequestLine,
	HTTPHeaders,
	HTTPProcessingStatus,
	"HTTPRequest",
]

# -----------------------------------------------------------------------------
#
# REQUESTS
#
# -----------------------------------------------------------------------------


class HTTPRequest:
	"""Represents a parsed HTTP request. The path is kept as it was sent
	(still percent-encoded), decoding is left to the resolver."""

	__slots__ = ["protocol", "method", "path", "query", "_headers", "_body"]

	def __init__(
		self,
		method: str,
		path: str,
		query: str,
		headers: HTTPHeaders,
		body: HTTPBodyBlob | None = None,
		protocol: str = "HTTP/1.1",
	):
		self.method: str = method
		self.path: str = path
		self.query: str = query
		self.protocol: str = protocol
		self._headers: HTTPHeaders = headers
		self._body: HTTPBodyBlob | None = body

	@property
	def uri(self) -> str:
		return f"{self.path}?{self.query}" if self.query else self.path

	@property
	def headers(self) -> dict[str, str]:
		return self._headers.headers

	@property
	def body(self) -> HTTPBodyBlob | None:
		return self._body

	def header(self, name: str) -> str | None:
		return self._headers.headers.get(headername(name))

	def param(self, name: str, default: str | None = None) -> str | None:
		for k, v in parse_qsl(self.query, keep_blank_values=True):
			if k == name:
				return v
		return default

	@property
	def keepAlive(self) -> bool:
		connection: str = (self.header("Connection") or "").lower()
		if self.protocol == "HTTP/1.0":
			return connection == "keep-alive"
		else:
			return connection != "close"

	def __str__(self) -> str:
		return f"Request({self.method} {self.uri} {self.headers})"


# -----------------------------------------------------------------------------
#
# RESPONSE
#
# -----------------------------------------------------------------------------


class HTTPResponse:
	"""An HTTP response, as a status, an ordered mapping of headers and an
	optional payload. Responses are built by the dispatcher and consumed
	once by the server."""

	__slots__ = ["protocol", "status", "message", "headers", "body"]

	@staticmethod
	def Create(
		content: str | bytes | None = None,
		contentType: str | None = None,
		contentLength: int | None = None,
		headers: dict[str, str] | None = None,
		status: int = 200,
		message: str | None = None,
		protocol: str = "HTTP/1.1",
	) -> "HTTPResponse":
		"""Factory method to create HTTP response objects. Headers given
		explicitly come first, in order, followed by the content type and
		length."""
		body: HTTPBodyBlob | None = None
		if content is None:
			pass
		elif isinstance(content, str):
			body = HTTPBodyBlob.FromBytes(content.encode(DEFAULT_ENCODING))
		elif isinstance(content, bytes):
			body = HTTPBodyBlob.FromBytes(content)
		else:
			raise ValueError(f"Unsupported content {type(content)}:{content}")
		res: dict[str, str] = dict(headers) if headers else {}
		if contentType is not None:
			res["Content-Type"] = contentType
		if contentLength is None and body is not None:
			contentLength = body.length
		if contentLength is not None:
			res["Content-Length"] = str(contentLength)
		return HTTPResponse(
			status=status,
			message=message or HTTP_STATUS.get(status, "Unknown status"),
			headers=HTTPHeaders(res, contentType=contentType, contentLength=contentLength),
			body=body,
			protocol=protocol,
		)

	def __init__(
		self,
		protocol: str,
		status: int,
		message: str | None,
		headers: HTTPHeaders,
		body: HTTPBodyBlob | None = None,
	):
		self.protocol: str = protocol
		self.status: int = status
		self.message: str | None = message
		self.headers: HTTPHeaders = headers
		self.body: HTTPBodyBlob | None = body

	@property
	def payload(self) -> bytes:
		return self.body.payload if self.body else b""

	def header(self, name: str) -> str | None:
		return self.headers.headers.get(headername(name))

	def setHeader(self, name: str, value: str | int | None) -> "HTTPResponse":
		if value is None:
			self.headers.headers.pop(headername(name), None)
		else:
			self.headers.headers[headername(name)] = str(value)
		return self

	def withoutBody(self) -> "HTTPResponse":
		"""Returns a copy of this response with the same head and no body,
		which is what a `HEAD` request expects."""
		return HTTPResponse(
			protocol=self.protocol,
			status=self.status,
			message=self.message,
			headers=self.headers,
			body=None,
		)

	def head(self) -> bytes:
		"""Serializes the status line and headers."""
		message: str = self.message or HTTP_STATUS.get(self.status, "Unknown status")
		lines: list[str] = [f"{self.protocol} {self.status} {message}"]
		lines += [f"{headername(k)}: {v}" for k, v in self.headers.headers.items()]
		lines.append("")
		lines.append("")
		return "\r\n".join(lines).encode("latin-1")

	def __str__(self) -> str:
		return f"Response({self.protocol} {self.status} {self.message} {self.headers.headers})"


# EOF
