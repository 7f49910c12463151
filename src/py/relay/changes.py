import os
import time
from pathlib import Path

from .utils.logging import debug, logged


def isHidden(name: str) -> bool:
	return name.startswith(".")


class ChangeTracker:
	"""Tells if anything changed under the root since a given time, by
	scanning the modification times of every non-hidden file. There is no
	state kept between queries: each query walks the whole tree, stopping at
	the first file that is newer."""

	def __init__(self, root: Path | str):
		self.root: Path = Path(root)

	@staticmethod
	def Now() -> int:
		"""The current time in milliseconds since the epoch."""
		return int(time.time() * 1000)

	def onError(self, error: OSError) -> None:
		logged(debug) and debug(
			"Skipping directory", Path=str(error.filename), Error=str(error)
		)

	def hasChangedSince(self, timestamp: float) -> bool:
		"""Returns `True` when at least one non-hidden file has a modification
		time strictly greater than `timestamp`, in milliseconds. Modification
		times are compared with their full precision."""
		threshold: float = timestamp * 1_000_000
		for dirpath, dirnames, filenames in os.walk(self.root, onerror=self.onError):
			dirnames[:] = [_ for _ in dirnames if not isHidden(_)]
			for name in filenames:
				if isHidden(name):
					continue
				try:
					mtime = os.stat(os.path.join(dirpath, name)).st_mtime_ns
				except OSError:
					continue
				if mtime > threshold:
					return True
		return False


# EOF
