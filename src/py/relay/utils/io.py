EOL: bytes = b"\r\n"

# Longest request or header line accepted, in bytes
MAX_LINE: int = 16_384


class LineTooLong(ValueError):
	pass


class LineParser:
	"""Accumulates bytes across chunks until a CRLF is found. Lines longer
	than `limit` raise `LineTooLong`."""

	__slots__ = ["buffer", "limit"]

	def __init__(self, limit: int = MAX_LINE) -> None:
		self.buffer: bytearray = bytearray()
		self.limit: int = limit

	def reset(self) -> "LineParser":
		self.buffer.clear()
		return self

	def feed(self, chunk: bytes, start: int = 0) -> tuple[bytes | None, int]:
		"""Returns the line, without its CRLF, once it is complete, along
		with the number of bytes consumed from `chunk` after `start`."""
		pos: int = len(self.buffer)
		self.buffer += chunk[start:]
		# The CR may have been the last byte of the previous chunk
		end: int = self.buffer.find(EOL, max(0, pos - 1))
		if end == -1:
			if len(self.buffer) > self.limit:
				raise LineTooLong(f"Line is longer than {self.limit} bytes")
			return None, len(chunk) - start
		line: bytes = bytes(self.buffer[:end])
		self.buffer.clear()
		return line, end + len(EOL) - pos


# EOF
