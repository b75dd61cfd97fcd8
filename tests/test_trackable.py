"""Tests for the progress-tracked HTTP helpers."""

import pytest

from batchstream.core.process import BatchError
from batchstream.core.progress import ProgressValues
from batchstream.exceptions import HTTPStatusError
from batchstream.http.trackable import (
    fetch_files,
    filename_for_url,
    get,
    get_file,
    get_list,
    get_total_size,
    unique_filenames,
)
from batchstream.http.transport import HttpTransport
from batchstream.models.config import TransportConfig

CONTENT = "Content to be served"


def assert_progress_complete(progress: ProgressValues, want: str) -> None:
    assert progress.total == len(want)
    assert progress.current == progress.total


class TestGet:
    def test_get(self, http_server, transport):
        url = http_server.serve("/", CONTENT)
        progress = ProgressValues()

        with get(progress, url, transport) as reader:
            got = reader.read()

        assert got == CONTENT.encode()
        assert_progress_complete(progress, CONTENT)

    def test_get_not_found(self, http_server, transport):
        with pytest.raises(HTTPStatusError):
            get(ProgressValues(), http_server.url("/nope"), transport)


class TestGetFile:
    def test_get_file(self, http_server, transport, tmp_path):
        url = http_server.serve("/", CONTENT)
        progress = ProgressValues()
        filename = tmp_path / "testGetFile.txt"

        get_file(progress, url, filename, transport)

        assert filename.read_text() == CONTENT
        assert_progress_complete(progress, CONTENT)
        assert progress.finished

    def test_get_file_small_chunks(self, http_server, tmp_path):
        body = bytes(range(256)) * 20
        url = http_server.serve("/bin", body)
        filename = tmp_path / "out.bin"

        with HttpTransport(TransportConfig(chunk_size=1024)) as transport:
            get_file(ProgressValues(), url, filename, transport)

        assert filename.read_bytes() == body


class TestGetTotalSize:
    def test_sums_lengths(self, http_server, transport):
        urls = [
            http_server.serve("/a", "foo"),
            http_server.serve("/b", "bar"),
            http_server.serve("/c", "BOO!"),
        ]

        assert get_total_size(urls, transport) == 10

    def test_stops_at_first_failure(self, http_server, transport):
        urls = [
            http_server.serve("/a", "foo"),
            http_server.url("/missing"),
            http_server.serve("/c", "BOO!"),
        ]

        with pytest.raises(HTTPStatusError):
            get_total_size(urls, transport)

        assert ("HEAD", "/c") not in http_server.requests


class TestGetList:
    @pytest.fixture
    def served(self, http_server):
        http_server.serve("/path1", "foo")
        http_server.serve("/path2", "bar")
        http_server.serve("/path3", "BOO!")
        return http_server

    def test_works(self, served, transport):
        urls = [served.url(p) for p in ("/path1", "/path2", "/path3")]
        progress = ProgressValues()

        stream, error = get_list(progress, urls, transport)
        assert error is None
        content = stream.read()

        assert content == b"foobarBOO!"
        assert progress.total == 10
        assert progress.current == 10

    def test_bad_url(self, served, transport):
        urls = [served.url(p) for p in ("/path1", "/path2", "/path4")]

        stream, error = get_list(ProgressValues(), urls, transport)

        assert error == HTTPStatusError(404)
        assert stream is not None

    def test_heads_before_gets(self, served, transport):
        urls = [served.url(p) for p in ("/path1", "/path2")]

        stream, _ = get_list(ProgressValues(), urls, transport)
        stream.read()

        methods = [method for method, _ in served.requests]
        assert methods == ["HEAD", "HEAD", "GET", "GET"]


class TestFetchFiles:
    def test_downloads_every_url(self, http_server, transport, tmp_path):
        urls = [http_server.serve("/one.txt", "foo"), http_server.serve("/two.txt", "bar")]
        progress = ProgressValues()

        assert fetch_files(progress, urls, tmp_path / "out", transport) is None

        assert (tmp_path / "out" / "one.txt").read_text() == "foo"
        assert (tmp_path / "out" / "two.txt").read_text() == "bar"
        assert progress.total == 6
        assert progress.current == 6

    def test_failures_do_not_stop_the_batch(self, http_server, transport, tmp_path):
        urls = [
            http_server.serve("/one.txt", "foo"),
            http_server.url("/missing.txt"),
            http_server.serve("/three.txt", "BOO!"),
        ]
        progress = ProgressValues()

        result = fetch_files(progress, urls, tmp_path, transport)

        assert isinstance(result, BatchError)
        assert [e.index for e in result] == [1]
        assert result.errors[0].cause == HTTPStatusError(404)
        assert (tmp_path / "three.txt").read_text() == "BOO!"
        assert progress.total == 7
        assert progress.current == 7

    def test_same_name_from_different_paths(self, http_server, transport, tmp_path):
        urls = [
            http_server.serve("/x/file.bin", "AAA"),
            http_server.serve("/y/file.bin", "BBB"),
        ]

        assert fetch_files(ProgressValues(), urls, tmp_path, transport) is None

        assert (tmp_path / "file.bin").read_text() == "AAA"
        assert (tmp_path / "file_1.bin").read_text() == "BBB"


@pytest.mark.parametrize(
    "url,want",
    [
        ("http://example.com/files/a.iso", "a.iso"),
        ("http://example.com/files/a%20b.txt?x=1", "a b.txt"),
        ("http://example.com/", "download_3"),
        ("http://example.com/..", "download_3"),
        ("http://example.com/a%00b", "ab"),
        ("http://example.com/c%3Ad%2A%3F.txt", "cd.txt"),
    ],
)
def test_filename_for_url(url, want):
    assert filename_for_url(url, 3) == want


def test_unique_filenames():
    urls = [
        "http://a/x/file.bin",
        "http://a/y/file.bin",
        "http://a/z/FILE.bin",
        "http://a/file_1.bin",
    ]

    assert unique_filenames(urls) == [
        "file.bin",
        "file_1.bin",
        "FILE_2.bin",
        "file_1_3.bin",
    ]
