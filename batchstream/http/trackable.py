"""
HTTP downloads that report their progress as they are read.
"""

import logging
import os
from pathlib import Path
from typing import Optional, Sequence
from urllib.parse import unquote, urlsplit

from pathvalidate import sanitize_filename

from batchstream.core.multisource import MultiSourceStream, open_sources
from batchstream.core.process import BatchError, JobFunc, process
from batchstream.core.progress import Progress, SharedProgress, TrackedStream

from .transport import HttpTransport

log = logging.getLogger(__name__)


def get(progress: Progress, url: str, transport: HttpTransport) -> TrackedStream:
    """
    Performs an HTTP GET request and returns a reader attached to the response
    body. The reader updates the progress object as it is read from; the total
    is set from the Content-Length header when the server sends one.
    """
    reader = transport.open(url)
    if reader.content_length is not None and reader.content_length >= 0:
        progress.set(reader.content_length)
    return TrackedStream(progress, reader)


def get_file(
    progress: Progress, url: str, filename: str | os.PathLike, transport: HttpTransport
) -> None:
    """
    Performs an HTTP GET for the URL and writes the response body to `filename`,
    updating the progress object as the file is downloaded.
    """
    chunk_size = transport.config.chunk_size
    reader = get(progress, url, transport)
    try:
        with open(filename, "wb") as f:
            while chunk := reader.read(chunk_size):
                f.write(chunk)
    finally:
        reader.close()
    log.debug(f"Saved {url} to '{filename}'")


def get_total_size(urls: Sequence[str], transport: HttpTransport) -> int:
    """
    Performs HEAD requests on the list of URLs and returns the sum of their
    Content-Length values.

    Raises:
        HTTPStatusError: For the first URL that does not answer with 200.
    """
    return sum(transport.probe_length(url) for url in urls)


def get_list(
    progress: Progress, urls: Sequence[str], transport: HttpTransport
) -> tuple[MultiSourceStream, Optional[Exception]]:
    """
    Presents the bodies of a list of URLs as one stream, read in order.

    HEAD requests are performed for every URL first so that the progress total
    covers the whole list. See `open_sources` for the returned (stream, error)
    pair.
    """
    return open_sources(progress, urls, transport)


def filename_for_url(url: str, index: int) -> str:
    """Derives a safe local file name from the last segment of the URL path."""
    name = os.path.basename(unquote(urlsplit(url).path))
    if name not in ("", ".", ".."):
        name = sanitize_filename(name)
    if name in ("", ".", ".."):
        return f"download_{index}"
    return name


def unique_filenames(urls: Sequence[str]) -> list[str]:
    """
    Derives one file name per URL. When a name is already taken by an earlier
    URL, the URL's index is appended to the stem ('file.bin' -> 'file_1.bin').
    """
    names: list[str] = []
    taken: set[str] = set()
    for index, url in enumerate(urls):
        name = filename_for_url(url, index)
        stem, suffix = os.path.splitext(name)
        n = index
        while name.casefold() in taken:
            name = f"{stem}_{n}{suffix}"
            n += 1
        taken.add(name.casefold())
        names.append(name)
    return names


def fetch_files(
    progress: Progress,
    urls: Sequence[str],
    directory: str | os.PathLike,
    transport: HttpTransport,
) -> Optional[BatchError]:
    """
    Downloads each URL to its own file inside `directory`.

    Every URL is attempted even when earlier ones fail. The progress total is
    the sum of the sizes of the URLs that could be probed. URLs whose paths end
    in the same name get distinct files (see `unique_filenames`).

    Returns:
        None if every download succeeded, otherwise a BatchError whose job
        indexes match positions in `urls`.
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)

    total = 0
    for url in urls:
        try:
            total += transport.probe_length(url)
        except Exception as e:
            log.debug(f"Could not probe {url}: {e}")
    progress.set(total)

    shared = SharedProgress(progress, fixed_total=True)

    def make_job(url: str, name: str) -> JobFunc:
        target = directory / name
        return JobFunc(lambda: get_file(shared, url, target, transport))

    error = process(
        [make_job(url, name) for url, name in zip(urls, unique_filenames(urls))]
    )
    progress.finish()
    return error
