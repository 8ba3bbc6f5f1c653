from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

from image_scoring.constants import APP_NAME

DEV_VERSION = "0.1.0-dev"


def get_version() -> str:
    """
    Installed distribution version.

    Source checkouts that were never installed fall back to a ``_version``
    file stamped at release time, then to the development version.
    """
    try:
        return version(APP_NAME)
    except PackageNotFoundError:
        pass

    version_file = Path(__file__).parent / "_version"
    if version_file.is_file():
        return version_file.read_text().strip() or DEV_VERSION
    return DEV_VERSION


__version__ = get_version()
