"""Remote dependency fetching for cfactory.

Dependencies without a local path are cloned with git or downloaded and
extracted from an archive URL into the scratch directory.
"""

from .fetcher import FetchMethod, SourceFetcher, archive_format, detect_fetch_method

__all__ = [
    "FetchMethod",
    "SourceFetcher",
    "archive_format",
    "detect_fetch_method",
]
