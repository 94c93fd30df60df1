"""
Process executor for the SOAP-UI command-line runners.

Runs testrunner / loadtestrunner synchronously through the shell so the
console redirection embedded in the argument string applies, then reads the
captured console log and, for pro licenses, the XML Data Export report.

The exit code is recorded but not inspected, except that on POSIX a shell
exit code of 126 or 127 with an empty console capture means the runner
itself could not be started and raises LaunchError.

There is no timeout: a hung runner hangs the run.
"""
import logging
import os
import subprocess
import time
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from soapui_engine.exceptions import LaunchError
from soapui_engine.types import RawOutput, RunRequest
from soapui_engine.utils.commands import CommandLine, build_test_command

logger = logging.getLogger(__name__)

# sh exit codes for "found but not executable" and "not found"
_SHELL_LAUNCH_FAILURES = (126, 127)


@dataclass
class ExecutionResult:
    """Result of launching the runner process."""
    exit_code: int
    duration: float
    command: str

    @property
    def success(self) -> bool:
        return self.exit_code == 0


class SoapUIExecutor:
    """
    Launches the SOAP-UI runner for a RunRequest and collects its output.

    Usage:
        executor = SoapUIExecutor(output_folder=Path("/tmp/soapui"))
        raw = executor.execute(request)
    """

    def __init__(
        self,
        output_folder: Optional[Path] = None,
        env: Optional[dict] = None,
    ) -> None:
        self.output_folder = output_folder
        self.base_env = env or {}

    def execute(self, request: RunRequest) -> RawOutput:
        """
        Run SOAP-UI and return the captured console text and XML report.

        Raises:
            ValidationError: If the request has no test suite or test case
            LaunchError: If the runner could not be started
        """
        self._trace(request, "SoapUIExecutor.execute: Entering")

        command_line = build_test_command(request, self.output_folder)
        self._trace(request, f"SoapUI TestRunner Command Line: {command_line.executable}")
        self._trace(request, f"SoapUI TestRunner Command Args: {command_line.arguments}")

        result = self.launch(command_line)
        self._trace(request, f"SoapUI runner exited with code {result.exit_code} after {result.duration:.2f}s")

        console_output = read_console_output(command_line.console_file)

        xml_document = None
        if request.supports_detailed_export:
            xml_document = load_export_document(command_line.export_file)

        self._trace(request, "SoapUIExecutor.execute: Exiting")
        return RawOutput(
            console_output=console_output,
            xml_document=xml_document,
            exit_code=result.exit_code,
        )

    def launch(self, command_line: CommandLine) -> ExecutionResult:
        """Start the runner and wait for it to exit."""
        start = time.time()

        if not command_line.executable.exists():
            raise self._launch_error(command_line, f"runner not found: {command_line.executable}")

        full_env = dict(os.environ)
        full_env.update(self.base_env)

        try:
            completed = subprocess.run(
                command_line.command,
                shell=True,
                cwd=command_line.working_dir,
                env=full_env,
            )
        except OSError as e:
            raise self._launch_error(command_line, str(e)) from e

        # The shell creates the capture file before exec, so a runner that never
        # started leaves it empty
        if (
            os.name != "nt"
            and completed.returncode in _SHELL_LAUNCH_FAILURES
            and not _has_output(command_line.console_file)
        ):
            raise self._launch_error(
                command_line, f"shell could not start the runner (exit code {completed.returncode})"
            )

        return ExecutionResult(
            exit_code=completed.returncode,
            duration=time.time() - start,
            command=command_line.command,
        )

    def _launch_error(self, command_line: CommandLine, reason: str) -> LaunchError:
        return LaunchError(
            f"Unable to launch SOAP-UI TestRunner with arguments {command_line.arguments} "
            f"in directory {command_line.working_dir} ({reason})",
            command=command_line.command,
            working_dir=str(command_line.working_dir),
        )

    @staticmethod
    def _trace(request: RunRequest, message: str) -> None:
        if request.trace_logging:
            logger.info(message)


def _has_output(path: Path) -> bool:
    return path.is_file() and path.stat().st_size > 0


def read_console_output(console_file: Path) -> str:
    """Read the redirected console log, or '' if the runner never wrote it."""
    if not console_file.exists():
        logger.error(f"Unable to find console output log file at: {console_file}")
        return ""
    try:
        return console_file.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.error(f"Unable to read console output log file at {console_file}: {e}")
        return ""


def load_export_document(export_file: Path) -> Optional[ET.Element]:
    """Parse the Data Export XML report, or None if missing or unreadable."""
    if not export_file.exists():
        logger.error(f"Unable to find detailed XML output log file at: {export_file}")
        return None
    try:
        return ET.parse(export_file).getroot()
    except ET.ParseError as e:
        logger.error(f"Unable to parse detailed XML output log file at {export_file}: {e}")
        return None
    except OSError as e:
        logger.error(f"Unable to read detailed XML output log file at {export_file}: {e}")
        return None
