import pytest

from relay.http.model import (
	HTTPHeaders,
	HTTPProcessingStatus,
	HTTPRequest,
	HTTPRequestLine,
	HTTPResponse,
	headername,
)
from relay.http.parser import HTTPParser
from relay.utils.io import LineParser, LineTooLong

GET: bytes = b"GET /docs/a%20b.txt?t=12&x=y HTTP/1.1\r\nHost: localhost\r\nAccept: */*\r\n\r\n"


def requests(parser: HTTPParser, *chunks: bytes) -> list[HTTPRequest]:
	res: list[HTTPRequest] = []
	for chunk in chunks:
		res += [_ for _ in parser.feed(chunk) if isinstance(_, HTTPRequest)]
	return res


def test_headername():
	assert headername("content-type") == "Content-Type"
	assert headername("X-FRAME-OPTIONS") == "X-Frame-Options"
	assert headername("Host") == "Host"


def test_parse_request():
	atoms = list(HTTPParser().feed(GET))
	assert atoms[0] == HTTPRequestLine("GET", "/docs/a%20b.txt", "t=12&x=y", "HTTP/1.1")
	assert isinstance(atoms[1], HTTPHeaders)
	req = atoms[-1]
	assert isinstance(req, HTTPRequest)
	assert req.method == "GET"
	assert req.path == "/docs/a%20b.txt"
	assert req.uri == "/docs/a%20b.txt?t=12&x=y"
	assert req.param("t") == "12"
	assert req.param("z", "default") == "default"
	assert req.header("host") == "localhost"
	assert req.headers["Accept"] == "*/*"


def test_parse_split_chunks():
	parser = HTTPParser()
	chunks = [GET[i : i + 3] for i in range(0, len(GET), 3)]
	reqs = requests(parser, *chunks)
	assert len(reqs) == 1
	assert reqs[0].uri == "/docs/a%20b.txt?t=12&x=y"
	assert reqs[0].header("Accept") == "*/*"


def test_parse_pipelined():
	other = b"HEAD / HTTP/1.1\r\nHost: localhost\r\n\r\n"
	reqs = requests(HTTPParser(), GET + other + GET)
	assert [_.method for _ in reqs] == ["GET", "HEAD", "GET"]
	assert reqs[1].path == "/"
	assert reqs[1].query == ""


def test_parse_body():
	parser = HTTPParser()
	head = b"POST /form HTTP/1.1\r\nContent-Length: 11\r\nContent-Type: text/plain\r\n\r\n"
	atoms = list(parser.feed(head + b"hello"))
	assert HTTPProcessingStatus.Body in atoms
	assert not [_ for _ in atoms if isinstance(_, HTTPRequest)]
	reqs = requests(parser, b" world" + GET)
	assert len(reqs) == 2
	assert reqs[0].body is not None
	assert reqs[0].body.payload == b"hello world"
	assert reqs[1].method == "GET"


def test_parse_skips_garbage_lines():
	reqs = requests(HTTPParser(), b"\r\ngarbage\r\n" + GET)
	assert len(reqs) == 1
	assert reqs[0].method == "GET"


def test_keep_alive():
	def req(protocol: str, connection: str | None = None) -> HTTPRequest:
		headers = {"Connection": connection} if connection else {}
		return HTTPRequest("GET", "/", "", HTTPHeaders(headers), protocol=protocol)

	assert req("HTTP/1.1").keepAlive
	assert req("HTTP/1.1", "keep-alive").keepAlive
	assert not req("HTTP/1.1", "close").keepAlive
	assert not req("HTTP/1.0").keepAlive
	assert req("HTTP/1.0", "Keep-Alive").keepAlive


def test_response_create():
	res = HTTPResponse.Create(
		"héllo",
		contentType="text/plain; charset=utf-8",
		headers={"Server": "Relay"},
	)
	assert res.status == 200
	assert res.message == "OK"
	assert res.payload == "héllo".encode("utf8")
	assert list(res.headers.headers) == ["Server", "Content-Type", "Content-Length"]
	assert res.header("content-length") == "6"


def test_response_head():
	res = HTTPResponse.Create(b"{}", headers={"Content-Type": "application/json"}, status=404)
	assert res.head() == (
		b"HTTP/1.1 404 Not Found\r\n"
		b"Content-Type: application/json\r\n"
		b"Content-Length: 2\r\n"
		b"\r\n"
	)


def test_response_set_header():
	res = HTTPResponse.Create(b"x")
	res.setHeader("connection", "close")
	assert res.header("Connection") == "close"
	res.setHeader("Connection", None)
	assert res.header("Connection") is None


def test_response_without_body():
	res = HTTPResponse.Create(b"content").withoutBody()
	assert res.body is None
	assert res.payload == b""
	assert res.header("Content-Length") == "7"


def test_parse_line_too_long():
	parser = HTTPParser()
	list(parser.feed(b"GET / HTTP/1.1\r\n"))
	with pytest.raises(LineTooLong):
		list(parser.feed(b"X-Long: " + b"x" * 20_000))


def test_line_split_after_cr():
	parser = LineParser()
	assert parser.feed(b"GET / HTTP/1.1\r") == (None, 15)
	assert parser.feed(b"\nHost") == (b"GET / HTTP/1.1", 1)


def test_parse_raw_utf8_target():
	reqs = requests(HTTPParser(), "GET /café.txt?q=é HTTP/1.1\r\n\r\n".encode("utf8"))
	assert reqs[0].path == "/café.txt"
	assert reqs[0].query == "q=é"
	assert reqs[0].protocol == "HTTP/1.1"


def test_parse_latin1_target():
	reqs = requests(HTTPParser(), b"GET /caf\xe9.txt HTTP/1.1\r\n\r\n")
	assert reqs[0].path == "/café.txt"
