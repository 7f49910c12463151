import os
from pathlib import Path

import pytest

from relay.config import RelayConfig

# A point in time well in the past, used to make the tree look untouched
PAST: float = 1_000_000_000.0


def touch(path: Path, content: str | bytes = "", mtime: float = PAST) -> Path:
	path.parent.mkdir(parents=True, exist_ok=True)
	if isinstance(content, str):
		path.write_text(content, encoding="utf8")
	else:
		path.write_bytes(content)
	os.utime(path, (mtime, mtime))
	return path


@pytest.fixture
def site(tmp_path: Path) -> Path:
	"""A small site, with every file dated in the past."""
	root = tmp_path / "site"
	touch(root / "index.html", "<html><body><h1>Home</h1></body></html>")
	touch(root / "style.css", "body { color: red; }")
	touch(root / "docs" / "a.txt", "alpha")
	touch(root / "docs" / "B.txt", "bravo")
	touch(root / "docs" / "notes", "plain notes\n")
	touch(root / ".git" / "HEAD", "ref: refs/heads/main")
	return root


@pytest.fixture
def config(site: Path) -> RelayConfig:
	return RelayConfig.Make(site)
