from pathlib import Path

import pytest

from relay.content import BINARY, TEXT_PLAIN, ContentTyper, isUTF8

from conftest import touch

PNG: bytes = b"\x89PNG\r\n\x1a\n" + bytes(range(256)) * 2


@pytest.mark.parametrize(
	"name,expected",
	[
		("index.html", "text/html; charset=utf-8"),
		("INDEX.HTM", "text/html; charset=utf-8"),
		("style.css", "text/css; charset=utf-8"),
		("app.mjs", "application/javascript; charset=utf-8"),
		("data.json", "application/json; charset=utf-8"),
		("main.py", TEXT_PLAIN),
		("README.md", TEXT_PLAIN),
		("config.toml", TEXT_PLAIN),
		("App.vue", TEXT_PLAIN),
		("font.woff2", "font/woff2"),
	],
)
def test_classify_by_extension(tmp_path: Path, name: str, expected: str):
	path = touch(tmp_path / name, "content")
	assert ContentTyper().classify(path) == expected


def test_classify_image_by_extension(tmp_path: Path):
	assert ContentTyper().classify(touch(tmp_path / "logo.png", PNG)) == "image/png"


def test_extensionless_ascii_is_text(tmp_path: Path):
	path = touch(tmp_path / "LICENSE", "Permission is hereby granted.\n")
	assert ContentTyper().classify(path) == TEXT_PLAIN


def test_unknown_extension_utf8_is_text(tmp_path: Path):
	path = touch(tmp_path / "notes.xyz", "Héllo wörld ✓\n")
	assert ContentTyper().classify(path) == TEXT_PLAIN


@pytest.mark.parametrize("name", ["image", "image.dat", "image.txt", "image.html"])
def test_png_magic_is_binary_regardless_of_extension(tmp_path: Path, name: str):
	assert ContentTyper().classify(touch(tmp_path / name, PNG)) == BINARY


@pytest.mark.parametrize(
	"magic",
	[
		b"\xff\xd8\xff\xe0",
		b"%PDF-1.4\n\xe2\xe3\xcf\xd3",
		b"PK\x03\x04\xff\xfe",
		b"\x7fELF\x02\x01\x01\xff",
		b"\xcf\xfa\xed\xfe\x07\x00",
		b"\xca\xfe\xba\xbe\x00\x02",
	],
)
def test_binary_signatures(tmp_path: Path, magic: bytes):
	path = touch(tmp_path / "blob", magic + b"\x80" * 16)
	assert ContentTyper().classify(path) == BINARY


def test_text_starting_like_a_signature_is_text(tmp_path: Path):
	assert ContentTyper().classify(touch(tmp_path / "notes.txt", "PK stands for")) == TEXT_PLAIN
	assert ContentTyper().classify(touch(tmp_path / "gif", "GIF is a format")) == TEXT_PLAIN


def test_mostly_printable_latin1_is_text(tmp_path: Path):
	# Invalid UTF-8, but only a few non-printable bytes
	path = touch(tmp_path / "legacy", "caf\xe9 au lait, s'il vous pla\xeet\n".encode("latin-1"))
	assert ContentTyper().classify(path) == TEXT_PLAIN


def test_mostly_non_printable_is_binary(tmp_path: Path):
	path = touch(tmp_path / "random", bytes([0x80, 0x81, 0x01, 0x02, 0x41]) * 50)
	assert ContentTyper().classify(path) == BINARY


def test_threshold_is_configurable(tmp_path: Path):
	# 4 out of 10 bytes are not printable
	path = touch(tmp_path / "mixed", b"\x80\x81\x82\x83abcdef")
	assert ContentTyper().classify(path) == BINARY
	assert ContentTyper(textThreshold=0.5).classify(path) == TEXT_PLAIN


def test_sample_size_is_configurable(tmp_path: Path):
	path = touch(tmp_path / "tail", b"a" * 64 + b"\x80\x81" * 64)
	assert ContentTyper(sampleSize=64).classify(path) == TEXT_PLAIN
	assert ContentTyper().classify(path) == BINARY


def test_empty_unknown_file_is_binary(tmp_path: Path):
	assert ContentTyper().classify(touch(tmp_path / "empty", b"")) == BINARY


def test_missing_file_is_binary(tmp_path: Path):
	assert ContentTyper().classify(tmp_path / "missing") == BINARY


def test_truncated_utf8_sequence_is_text(tmp_path: Path):
	# The sample ends in the middle of a 3-byte character
	path = touch(tmp_path / "cut", "a" * 511 + "✓")
	assert ContentTyper().classify(path) == TEXT_PLAIN


def test_is_utf8():
	assert isUTF8("✓".encode("utf8"))
	assert isUTF8("✓".encode("utf8")[:2])
	assert not isUTF8(b"\xff\xfe")


def test_classify_is_deterministic(tmp_path: Path):
	path = touch(tmp_path / "data.bin", bytes(range(256)))
	typer = ContentTyper()
	assert len({typer.classify(path) for _ in range(5)}) == 1


def test_classify_given_content(tmp_path: Path):
	typer = ContentTyper()
	# The file doesn't exist, so only the given content can be sampled
	assert typer.classify(tmp_path / "missing.txt", content=PNG) == BINARY
	assert typer.classify(tmp_path / "missing", content=b"hello\n") == TEXT_PLAIN
	assert typer.classify(tmp_path / "missing", content=b"") == BINARY
	assert typer.classify(tmp_path / "missing.css", content=b"a{}") == "text/css; charset=utf-8"


def test_classify_given_content_is_sampled(tmp_path: Path):
	content = b"a" * 64 + b"\x80\x81" * 64
	assert ContentTyper(sampleSize=64).classify(tmp_path / "missing", content=content) == TEXT_PLAIN
	assert ContentTyper().classify(tmp_path / "missing", content=content) == BINARY
