from sidecar.version import __version__

name = "sidecar"

__all__ = ["__version__"]
