"""
Base engine contract for host (RemoteLaunch) integration.

The host loads an engine, reads its identity metadata, hands it an
AutomatedTestRun and reads back the populated run plus the engine status.

CONTRACT:
1. Host builds AutomatedTestRun (locator string + parameters)
2. engine.start_execution(run) -> the same run, populated
3. Host reads engine.status (OK/Error) and the run's results
4. On failure start_execution raises; status is Error and the run is Failed
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, Protocol, Tuple, runtime_checkable

from soapui_engine.types import AutomatedTestRun, EngineStatus


class BaseEngine(ABC):
    """Base class for automation engines the host can drive."""

    extension_id: str = ""
    extension_name: str = ""
    extension_token: str = ""
    extension_version: str = ""
    extension_author: str = ""

    def __init__(self) -> None:
        self.status = EngineStatus.OK

    @abstractmethod
    def start_execution(
        self,
        automated_test_run: AutomatedTestRun,
        project_id: Optional[int] = None,
    ) -> AutomatedTestRun:
        """Execute the test referenced by the run and populate its results.

        Args:
            automated_test_run: The run requested by the host
            project_id: Host project the run belongs to

        Returns:
            The populated test run
        """
        pass

    @staticmethod
    def create_parameter_token(parameter_name: str) -> str:
        """Token used to reference a test run parameter (Ant/NAnt style)."""
        return "${" + parameter_name + "}"


@dataclass(frozen=True)
class FileConstraints:
    """What kind of file a FileSelector may return."""

    extensions: Tuple[str, ...] = field(default_factory=tuple)
    """Allowed suffixes including the dot, e.g. ('.bat', '.sh'). Empty = any."""

    must_exist: bool = True


@runtime_checkable
class FileSelector(Protocol):
    """Capability for choosing a file, implemented by the host platform."""

    def select_file(self, constraints: FileConstraints) -> Optional[str]:
        """Return the chosen path, or None if nothing acceptable was chosen."""
        ...
