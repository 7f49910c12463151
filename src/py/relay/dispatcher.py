import math
from email.utils import formatdate
from urllib.parse import parse_qsl

from .changes import ChangeTracker
from .config import RELOAD_ENDPOINT, SERVER_NAME, RelayConfig
from .content import ContentTyper
from .http.model import HTTPRequest, HTTPResponse
from .listing import DirectoryRenderer
from .reload import ReloadInjector
from .resolver import PathResolver, ResolvedEntry
from .templates import NOT_FOUND_HTML
from .utils.json import json
from .utils.logging import debug, logged

HTML_TYPE: str = "text/html; charset=utf-8"
JSON_TYPE: str = "application/json"
ALLOWED_METHODS: tuple[str, ...] = ("GET", "HEAD")


def splitURI(uri: str) -> tuple[str, str]:
	"""Splits the URI into its path and query, dropping any fragment."""
	uri = uri.split("#", 1)[0]
	path, _, query = uri.partition("?")
	return path, query


def parseTimestamp(query: str) -> float:
	"""Extracts the `t` parameter of the reload check query, in
	milliseconds since the epoch, defaulting to `0`."""
	for k, v in parse_qsl(query, keep_blank_values=True):
		if k == "t":
			try:
				t = float(v)
			except ValueError:
				return 0.0
			return t if math.isfinite(t) else 0.0
	return 0.0


class RequestDispatcher:
	"""Maps a request URI to a response: the reload check endpoint when live
	reload is enabled, otherwise a file, a directory listing or the not found
	page. Each request is handled in a single pass, with no state shared
	between requests."""

	def __init__(self, config: RelayConfig):
		self.config: RelayConfig = config
		self.resolver: PathResolver = PathResolver(config)
		self.typer: ContentTyper = ContentTyper(config.sampleSize, config.textThreshold)
		self.renderer: DirectoryRenderer = DirectoryRenderer()
		self.tracker: ChangeTracker = ChangeTracker(config.root)
		self.injector: ReloadInjector = ReloadInjector(RELOAD_ENDPOINT)

	def process(self, request: HTTPRequest) -> HTTPResponse:
		"""Processes a parsed request, as done by the server."""
		if request.method not in ALLOWED_METHODS:
			return HTTPResponse.Create(
				"Method Not Allowed",
				contentType="text/plain",
				headers={"Server": SERVER_NAME, "Allow": ", ".join(ALLOWED_METHODS)},
				status=405,
				protocol=request.protocol,
			)
		res = self.dispatch(request.uri)
		res.protocol = request.protocol
		return res.withoutBody() if request.method == "HEAD" else res

	def dispatch(self, uri: str) -> HTTPResponse:
		path, query = splitURI(uri)
		if self.config.liveReload and path.startswith(RELOAD_ENDPOINT):
			return self.serveReloadCheck(query)
		entry = self.resolver.resolve(path)
		if entry.isFile:
			return self.serveFile(entry)
		elif entry.isDirectory:
			return self.serveDirectory(entry)
		else:
			return self.serveNotFound()

	def serveReloadCheck(self, query: str) -> HTTPResponse:
		since = parseTimestamp(query)
		# Taken before the scan, a change made during it shows up next time
		now = ChangeTracker.Now()
		payload = json(
			{"hasChanges": self.tracker.hasChangedSince(since), "timestamp": now}
		)
		return HTTPResponse.Create(
			payload,
			headers={
				"Server": SERVER_NAME,
				"Content-Type": JSON_TYPE,
				"Cache-Control": "no-cache, no-store, must-revalidate",
			},
		)

	def serveFile(self, entry: ResolvedEntry) -> HTTPResponse:
		if entry.path is None:
			return self.serveNotFound()
		try:
			with open(entry.path, "rb") as f:
				body = f.read()
		except OSError as e:
			logged(debug) and debug("Could not read file", Path=str(entry.path), Error=str(e))
			return self.serveNotFound()
		contentType = self.typer.classify(entry.path, entry.extension, body)
		if self.config.liveReload and ReloadInjector.Applies(entry.path):
			body = self.injector.inject(body)
		headers: dict[str, str] = {
			"Server": SERVER_NAME,
			"Content-Type": contentType,
			"Content-Length": str(len(body)),
			"X-Content-Type-Options": "nosniff",
			"X-Frame-Options": "SAMEORIGIN",
		}
		if entry.mtime is not None:
			headers["Last-Modified"] = formatdate(entry.mtime, usegmt=True)
		return HTTPResponse.Create(body, headers=headers)

	def serveDirectory(self, entry: ResolvedEntry) -> HTTPResponse:
		if entry.path is None:
			return self.serveNotFound()
		try:
			items = self.renderer.listDirectory(entry.path)
		except OSError as e:
			logged(debug) and debug("Could not list directory", Path=str(entry.path), Error=str(e))
			return self.serveNotFound()
		return HTTPResponse.Create(
			self.renderer.render(items, entry.requestPath),
			headers={"Server": SERVER_NAME, "Content-Type": HTML_TYPE},
		)

	def serveNotFound(self) -> HTTPResponse:
		return HTTPResponse.Create(
			NOT_FOUND_HTML,
			headers={"Server": SERVER_NAME, "Content-Type": HTML_TYPE},
			status=404,
		)


# EOF
