"""Host-facing engine implementations."""

from .base import BaseEngine, FileConstraints, FileSelector
from .file_selector import PathFileSelector, select_runner_location
from .soapui_adapter import SoapUIEngine, parse_locator

__all__ = [
    # Base contract
    "BaseEngine",
    "FileConstraints",
    "FileSelector",
    # Implementations
    "PathFileSelector",
    "SoapUIEngine",
    # Helpers
    "parse_locator",
    "select_runner_location",
]
