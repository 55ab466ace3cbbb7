"""PocketGallery: browse a local directory tree as a media gallery."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pocketgallery")
except PackageNotFoundError:
    __version__ = "0.0.0"
