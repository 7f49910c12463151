import os
import time
from pathlib import Path

from relay.changes import ChangeTracker

from conftest import PAST, touch


def test_any_file_is_newer_than_zero(site: Path):
	assert ChangeTracker(site).hasChangedSince(0)


def test_untouched_tree_has_no_changes(site: Path):
	assert not ChangeTracker(site).hasChangedSince(ChangeTracker.Now())


def test_boundary_is_strict(site: Path):
	tracker = ChangeTracker(site)
	assert not tracker.hasChangedSince(PAST * 1000)
	assert tracker.hasChangedSince(PAST * 1000 - 1)


def test_modified_file_is_detected(site: Path):
	tracker = ChangeTracker(site)
	since = ChangeTracker.Now() - 60_000
	assert not tracker.hasChangedSince(since)
	os.utime(site / "docs" / "a.txt", None)
	assert tracker.hasChangedSince(since)


def test_new_nested_file_is_detected(site: Path):
	tracker = ChangeTracker(site)
	since = (time.time() - 60) * 1000
	touch(site / "docs" / "deep" / "new.md", "# New", mtime=time.time())
	assert tracker.hasChangedSince(since)


def test_hidden_files_are_ignored(site: Path):
	tracker = ChangeTracker(site)
	since = ChangeTracker.Now() - 60_000
	now = time.time()
	touch(site / ".env", "SECRET=1", mtime=now)
	touch(site / "docs" / ".cache", "x", mtime=now)
	assert not tracker.hasChangedSince(since)


def test_hidden_directories_are_ignored(site: Path):
	tracker = ChangeTracker(site)
	since = ChangeTracker.Now() - 60_000
	touch(site / ".git" / "objects" / "ab", "blob", mtime=time.time())
	assert not tracker.hasChangedSince(since)


def test_directories_are_not_compared(site: Path):
	tracker = ChangeTracker(site)
	since = ChangeTracker.Now() - 60_000
	# Deleting a file only touches its directory
	(site / "docs" / "notes").unlink()
	now = time.time()
	os.utime(site / "docs", (now, now))
	assert not tracker.hasChangedSince(since)


def test_missing_root_has_no_changes(tmp_path: Path):
	assert not ChangeTracker(tmp_path / "missing").hasChangedSince(0)


def test_now_is_milliseconds():
	now = ChangeTracker.Now()
	assert isinstance(now, int)
	assert abs(now - time.time() * 1000) < 5_000


def test_sub_millisecond_change_is_detected(site: Path):
	tracker = ChangeTracker(site)
	since = int(PAST * 1000)
	# Half a millisecond after `since`
	mtime_ns = since * 1_000_000 + 500_000
	os.utime(site / "style.css", ns=(mtime_ns, mtime_ns))
	assert tracker.hasChangedSince(since)
	assert not tracker.hasChangedSince(since + 1)
