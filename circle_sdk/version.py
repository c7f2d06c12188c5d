"""
Version of the installed circle-sdk distribution.

The same string is sent in the ``User-Agent`` header of every request.
"""
from importlib import metadata

DISTRIBUTION = "circle-sdk"
UNKNOWN_VERSION = "0.0.0+unknown"


def get_version(distribution: str = DISTRIBUTION) -> str:
    try:
        return metadata.version(distribution)
    except metadata.PackageNotFoundError:
        # source tree that was never installed
        return UNKNOWN_VERSION


__version__ = get_version()
