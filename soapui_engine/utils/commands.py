"""
Command building utilities for SOAP-UI runs.

Builds the testrunner / loadtestrunner command line for the four run modes:

    Pro (data export):
        testrunner -a -s"Requirements Testing" -c"Get Requirements" -r -FXML
            -R"Data Export" -f"<output>" "<project.xml>" > "<output>/console.log"

    Free (console summary only):
        testrunner -a -s"Requirements Testing" -c"Get Requirements" -r
            "<project.xml>" > "<output>/console.log"

The load test variants are identical apart from the runner script.
"""
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from soapui_engine.exceptions import ValidationError
from soapui_engine.types import RunRequest

TEST_RUNNER = "testrunner"
LOAD_TEST_RUNNER = "loadtestrunner"
RUNNER_SUFFIX = ".bat" if os.name == "nt" else ".sh"

# Characters escaped inside double quotes; backslash first
_QUOTED_SPECIALS = ('"',) if os.name == "nt" else ("\\", '"', "$", "`")

CONSOLE_LOG = "console.log"
FUNCTIONAL_EXPORT = "TestCaseTestStepResults.xml"
LOAD_TEST_EXPORT = "LoadTestLog.xml"

OUTPUT_SUBFOLDER = Path("Inflectra") / "RemoteLaunch_SoapUiRunner"


@dataclass(frozen=True)
class CommandLine:
    """A fully built runner invocation."""

    executable: Path
    arguments: str
    working_dir: Path
    output_folder: Path
    console_file: Path
    export_file: Path

    @property
    def command(self) -> str:
        """Shell command string, including the console redirection."""
        return f'"{self.executable}" {self.arguments}'


def runner_script_name(is_load_test: bool) -> str:
    """Name of the runner script SOAP-UI ships for this platform."""
    base = LOAD_TEST_RUNNER if is_load_test else TEST_RUNNER
    return base + RUNNER_SUFFIX


def default_output_folder() -> Path:
    """Per-user cache location for run artifacts."""
    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or str(Path.home() / "AppData" / "Local")
    else:
        base = os.environ.get("XDG_CACHE_HOME") or str(Path.home() / ".cache")
    return Path(base) / OUTPUT_SUBFOLDER


def prepare_output_folder(output_folder: Path) -> Path:
    """Delete and recreate the output folder so no stale artifacts survive."""
    if output_folder.exists():
        shutil.rmtree(output_folder)
    output_folder.mkdir(parents=True)
    return output_folder


def export_file_path(output_folder: Path, test_suite: str, test_case: str, is_load_test: bool) -> Path:
    """Where the Data Export report for a suite/case lands."""
    filename = LOAD_TEST_EXPORT if is_load_test else FUNCTIONAL_EXPORT
    return output_folder / test_suite.replace(" ", "-") / test_case.replace(" ", "-") / filename


def escape_quoted(value: str) -> str:
    """Escape a value for use inside a double-quoted argument.

    On POSIX the command runs through sh, where \\, $ and ` stay live
    inside double quotes, so they are escaped too.
    """
    for char in _QUOTED_SPECIALS:
        value = value.replace(char, "\\" + char)
    return value


def format_parameter(name: str, value: Optional[str]) -> str:
    """Format one project property as -Pname=value.

    Spaces and equals signs are stripped from both sides, quotes in the
    value are doubled.
    """
    clean_name = name.replace(" ", "").replace("=", "")
    clean_value = (value or "").replace(" ", "").replace("=", "").replace('"', '""')
    return f"-P{clean_name}={clean_value}"


def build_arguments(
    request: RunRequest,
    output_folder: Path,
    console_file: Path,
) -> str:
    """Compose the runner argument string in the order SOAP-UI expects."""
    args: List[str] = [
        # -a includes all test information, not just errors
        "-a",
        f'-s"{escape_quoted(request.test_suite)}"',
        f'-c"{escape_quoted(request.test_case)}"',
    ]

    if request.supports_detailed_export:
        args.append(f'-r -FXML -R"Data Export" -f"{escape_quoted(str(output_folder))}"')
    else:
        args.append("-r")

    for name, value in request.parameters.items():
        args.append(format_parameter(name, value))

    command_args = " ".join(args)

    if request.extra_switches and request.extra_switches.strip():
        command_args += f" {request.extra_switches} "

    command_args += f' "{escape_quoted(request.project_path)}"'
    command_args += f' > "{escape_quoted(str(console_file))}"'
    return command_args


def build_test_command(
    request: RunRequest,
    output_folder: Optional[Path] = None,
) -> CommandLine:
    """
    Build the SOAP-UI command line for a run request.

    The output folder is wiped and recreated as a side effect.

    Args:
        request: The run to build a command for
        output_folder: Artifact folder (defaults to the user cache location)

    Returns:
        The executable, argument string and artifact locations

    Raises:
        ValidationError: If the test suite or test case name is empty
    """
    if not request.test_suite:
        raise ValidationError("You need to provide a test suite name")
    if not request.test_case:
        raise ValidationError("You need to provide a test case name")

    folder = prepare_output_folder(output_folder or default_output_folder())
    console_file = folder / CONSOLE_LOG

    working_dir = Path(request.working_directory)
    return CommandLine(
        executable=working_dir / runner_script_name(request.is_load_test),
        arguments=build_arguments(request, folder, console_file),
        working_dir=working_dir,
        output_folder=folder,
        console_file=console_file,
        export_file=export_file_path(folder, request.test_suite, request.test_case, request.is_load_test),
    )


def dedupe_parameters(parameters: Iterable[Tuple[str, Optional[str]]]) -> Dict[str, str]:
    """Lower-case parameter names, keeping the first value for each name."""
    result: Dict[str, str] = {}
    for name, value in parameters:
        key = name.lower()
        if key not in result:
            result[key] = value or ""
    return result
