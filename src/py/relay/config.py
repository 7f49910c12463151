import os
from os import getenv
from pathlib import Path
from typing import NamedTuple

DEFAULT_ENCODING: str = "utf8"

PORT: int = int(getenv("PORT", 8080))

# Relay is a local preview server, so we only listen on the loopback interface
# unless told otherwise.
HOST: str = getenv("HOST", "127.0.0.1")

LOG_REQUESTS: bool = getenv("RELAY_LOG_REQUESTS", "1") == "1"
LOG_LEVEL: str = getenv("RELAY_LOG_LEVEL", "info").lower()

SERVER_NAME: str = "Relay"

# Prefix of the endpoint polled by the live reload script
RELOAD_ENDPOINT: str = "/__relay_check__"

# Probed in order when a directory is requested
INDEX_FILES: tuple[str, ...] = (
	"index.html",
	"index.htm",
	"default.html",
	"default.htm",
	"home.html",
	"home.htm",
)

# Content sniffing heuristics for files with an unknown extension
SNIFF_SAMPLE_SIZE: int = 512
SNIFF_TEXT_THRESHOLD: float = 0.3


class RelayConfig(NamedTuple):
	"""The immutable configuration of a running Relay server. It is created
	once at startup and passed to every component."""

	root: Path
	host: str = HOST
	port: int = PORT
	liveReload: bool = True
	sampleSize: int = SNIFF_SAMPLE_SIZE
	textThreshold: float = SNIFF_TEXT_THRESHOLD
	indexFiles: tuple[str, ...] = INDEX_FILES
	logRequests: bool = LOG_REQUESTS

	@staticmethod
	def Make(
		root: str | Path = ".",
		*,
		host: str = HOST,
		port: int = PORT,
		liveReload: bool = True,
		sampleSize: int = SNIFF_SAMPLE_SIZE,
		textThreshold: float = SNIFF_TEXT_THRESHOLD,
		logRequests: bool = LOG_REQUESTS,
	) -> "RelayConfig":
		"""Creates a configuration, resolving the root to its real path so
		that containment checks compare like with like."""
		return RelayConfig(
			root=Path(os.path.realpath(root)),
			host=host,
			port=port,
			liveReload=liveReload,
			sampleSize=sampleSize,
			textThreshold=textThreshold,
			logRequests=logRequests,
		)


# EOF
