import re
from pathlib import Path
from typing import ClassVar, Pattern

from .config import DEFAULT_ENCODING, RELOAD_ENDPOINT

# The client polls the reload endpoint with the last timestamp it got, and
# reloads when the server reports changes. When the endpoint can't be reached
# it falls back to comparing the page's `Last-Modified` header.
RELOAD_SCRIPT: str = """<script>
(function() {
	let lastCheck = Date.now();
	async function checkForChanges() {
		try {
			const response = await fetch('{endpoint}?t=' + lastCheck, {
				cache: 'no-cache'
			});
			if (response.ok) {
				const data = await response.json();
				if (data.hasChanges) {
					window.location.reload();
				}
				lastCheck = data.timestamp;
			}
		} catch (e) {
			try {
				const response = await fetch(window.location.href, {
					method: 'HEAD',
					cache: 'no-cache'
				});
				const modified = Date.parse(response.headers.get('Last-Modified'));
				if (modified) {
					if (lastCheck && modified > lastCheck) {
						window.location.reload();
					}
					lastCheck = Math.max(lastCheck, modified);
				}
			} catch (e2) {
				console.error('Relay auto-reload check failed:', e2);
			}
		}
	}
	setTimeout(checkForChanges, 50);
	setInterval(checkForChanges, 250);
})();
</script>"""


class ReloadInjector:
	"""Embeds the live reload script in HTML documents."""

	EXTENSIONS: ClassVar[tuple[str, ...]] = (".html", ".htm")
	RE_BODY: ClassVar[Pattern[str]] = re.compile(r"</body>", re.IGNORECASE)
	RE_HTML: ClassVar[Pattern[str]] = re.compile(r"</html>", re.IGNORECASE)

	@classmethod
	def Applies(cls, path: Path | str) -> bool:
		return str(path).lower().endswith(cls.EXTENSIONS)

	def __init__(self, endpoint: str = RELOAD_ENDPOINT):
		self.script: str = RELOAD_SCRIPT.replace("{endpoint}", endpoint)

	def inject(self, body: bytes) -> bytes:
		"""Inserts the script right before the first `</body>`, or the first
		`</html>`, or at the end of the document. Bodies that are not valid
		UTF-8 are returned as-is."""
		try:
			html = body.decode(DEFAULT_ENCODING)
		except UnicodeDecodeError:
			return body
		match = self.RE_BODY.search(html) or self.RE_HTML.search(html)
		if match:
			i = match.start()
			html = f"{html[:i]}{self.script}{html[i:]}"
		else:
			html = f"{html}{self.script}"
		return html.encode(DEFAULT_ENCODING)


# EOF
