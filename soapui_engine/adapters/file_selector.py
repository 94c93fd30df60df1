"""FileSelector implementation for headless use (CLI, tests)."""
import logging
from pathlib import Path
from typing import Optional, Union

from soapui_engine.adapters.base import FileConstraints, FileSelector

logger = logging.getLogger(__name__)

RUNNER_CONSTRAINTS = FileConstraints(extensions=(".bat", ".sh"), must_exist=True)


class PathFileSelector(FileSelector):
    """Selects a path typed by the user instead of showing a dialog."""

    def __init__(self, candidate: Union[str, Path]) -> None:
        self.candidate = Path(candidate).expanduser()

    def select_file(self, constraints: FileConstraints) -> Optional[str]:
        if constraints.must_exist and not self.candidate.is_file():
            logger.warning(f"Selected file does not exist: {self.candidate}")
            return None
        if constraints.extensions and self.candidate.suffix.lower() not in constraints.extensions:
            logger.warning(
                f"Selected file {self.candidate.name} is not one of {', '.join(constraints.extensions)}"
            )
            return None
        return str(self.candidate)


def select_runner_location(selector: FileSelector) -> Optional[str]:
    """Ask for a runner script and return the directory that contains it."""
    selected = selector.select_file(RUNNER_CONSTRAINTS)
    if selected is None:
        return None
    return str(Path(selected).parent)
