"""SOAP-UI automation engine - drives the SOAP-UI command-line runners for a test-management host."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("soapui-engine")
except PackageNotFoundError:
    # Package not installed, fallback to pyproject.toml version
    __version__ = "4.0.1"
