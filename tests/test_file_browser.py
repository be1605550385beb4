from pathlib import Path

import pytest

from hraudiowizard.file_browser import BrowserEntry, FileBrowser, format_size


@pytest.fixture
def tree(tmp_path):
    (tmp_path / "sub").mkdir()
    (tmp_path / ".hidden").mkdir()
    (tmp_path / "a.wav").write_bytes(b"x" * 10)
    (tmp_path / "C.FLAC").write_bytes(b"y" * 2048)
    (tmp_path / "notes.txt").write_text("hello")
    (tmp_path / ".secret.wav").write_bytes(b"z")
    return tmp_path


def test_format_size_units():
    assert format_size(512) == "512 B"
    assert format_size(1023).endswith(" B")
    assert format_size(1024) == "1 KB"
    assert format_size(5 * 1024 * 1024) == "5 MB"


def test_format_size_negative():
    with pytest.raises(ValueError):
        format_size(-1)


def test_entry_labels(tmp_path):
    directory = BrowserEntry(tmp_path / "music", True)
    assert directory.label == "[DIR] music"
    track = BrowserEntry(tmp_path / "song.wav", False, 100)
    assert track.label == "song.wav (100 B)"


def test_has_valid_extension_is_case_insensitive(tmp_path):
    browser = FileBrowser(tmp_path)
    assert browser.has_valid_extension("track.WAV")
    assert browser.has_valid_extension("track.aif")
    assert not browser.has_valid_extension("track.opus")
    assert not browser.has_valid_extension("README")


def test_empty_filter_accepts_everything(tmp_path):
    browser = FileBrowser(tmp_path)
    browser.set_extension_filter([])
    assert browser.has_valid_extension("anything.xyz")


def test_custom_filter(tmp_path):
    browser = FileBrowser(tmp_path, extensions=[".TXT"])
    assert browser.has_valid_extension("notes.txt")
    assert not browser.has_valid_extension("a.wav")


def test_entries_order_and_filtering(tree):
    browser = FileBrowser(tree)
    names = [entry.name for entry in browser.entries()]
    assert names == ["sub", "C.FLAC", "a.wav"]


def test_entries_sizes(tree):
    browser = FileBrowser(tree)
    by_name = {entry.name: entry for entry in browser.entries()}
    assert by_name["a.wav"].size == 10
    assert by_name["C.FLAC"].label == "C.FLAC (2 KB)"
    assert by_name["sub"].is_dir


def test_navigate_to_directory_and_up(tree):
    browser = FileBrowser(tree)
    assert browser.navigate_to(tree / "sub")
    assert browser.current == tree / "sub"
    assert browser.go_up()
    assert browser.current == tree


def test_navigate_to_rejects_files_and_missing(tree):
    browser = FileBrowser(tree)
    assert not browser.navigate_to(tree / "a.wav")
    assert not browser.navigate_to(tree / "missing")
    assert browser.current == tree


def test_default_start_is_home():
    assert FileBrowser().current == Path.home()


def test_select_valid_file(tree):
    browser = FileBrowser(tree)
    chosen = browser.select(tree / "a.wav")
    assert chosen == str(tree / "a.wav")
    assert browser.selected == chosen


def test_select_rejects_filtered_and_directories(tree):
    browser = FileBrowser(tree)
    with pytest.raises(ValueError):
        browser.select(tree / "notes.txt")
    with pytest.raises(ValueError):
        browser.select(tree / "sub")
    assert browser.selected is None