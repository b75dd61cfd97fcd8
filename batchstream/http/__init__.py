"""
HTTP Layer.

This package fetches remote sources over HTTP and adapts them to the
progress-tracked streams of the core package.
"""

from .trackable import fetch_files, get, get_file, get_list, get_total_size
from .transport import HttpBodyReader, HttpTransport

__all__ = [
    "HttpBodyReader",
    "HttpTransport",
    "fetch_files",
    "get",
    "get_file",
    "get_list",
    "get_total_size",
]
