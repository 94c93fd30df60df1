"""
Shared type definitions for the SOAP-UI engine.

This module contains the data model passed between the command builder,
executor, result parser and engine, kept here to avoid circular imports.

FLOW:
1. Engine turns an AutomatedTestRun into a RunRequest
2. Executor runs SOAP-UI for the RunRequest -> RawOutput
3. Parser turns RawOutput into a RunResult
4. Engine copies the RunResult back onto the AutomatedTestRun
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from xml.etree.ElementTree import Element


class ExecutionStatus(str, Enum):
    """Test status vocabulary of the host application."""
    FAILED = "Failed"
    PASSED = "Passed"
    NOT_RUN = "NotRun"
    NOT_APPLICABLE = "NotApplicable"
    BLOCKED = "Blocked"
    CAUTION = "Caution"

    @property
    def status_id(self) -> int:
        """Numeric id the host stores for this status."""
        return _STATUS_IDS[self]


_STATUS_IDS = {
    ExecutionStatus.FAILED: 1,
    ExecutionStatus.PASSED: 2,
    ExecutionStatus.NOT_RUN: 3,
    ExecutionStatus.NOT_APPLICABLE: 4,
    ExecutionStatus.BLOCKED: 5,
    ExecutionStatus.CAUTION: 6,
}


class AttachmentType(str, Enum):
    """How the host attached the test script to the test case."""
    URL = "url"
    EMBEDDED = "embedded"


class EngineStatus(str, Enum):
    """Health flag the host polls after each run."""
    OK = "OK"
    ERROR = "Error"


class RunState(str, Enum):
    """Lifecycle of a single run inside the engine."""
    IDLE = "idle"
    VALIDATING = "validating"
    RUNNING = "running"
    PARSING = "parsing"
    DONE = "done"
    FAILED = "failed"
    ERROR = "error"


# ============================================================================
# Run input
# ============================================================================


@dataclass(frozen=True)
class RunRequest:
    """Everything needed to launch one SOAP-UI run."""

    working_directory: str
    """SOAP-UI bin directory (where the testrunner script lives)."""

    project_path: str
    """Project file or composite project directory, placeholders resolved."""

    test_suite: str
    test_case: str

    extra_switches: Optional[str] = None
    """Raw command-line switches appended verbatim."""

    parameters: Dict[str, str] = field(default_factory=dict)
    """Project properties, keys lower-cased and de-duplicated by the caller."""

    supports_detailed_export: bool = False
    """Pro license: write the XML 'Data Export' report."""

    is_load_test: bool = False
    trace_logging: bool = False

    @property
    def display_name(self) -> str:
        return f"{self.test_suite} / {self.test_case}"


@dataclass(frozen=True)
class TestLocator:
    """Parsed form of the pipe-delimited test locator string."""

    __test__ = False

    project_path: str
    test_suite: str
    test_case: str
    extra_switches: Optional[str] = None


# ============================================================================
# Raw and parsed output
# ============================================================================


@dataclass
class RawOutput:
    """Console text and optional XML export captured from one run."""

    console_output: str
    xml_document: Optional[Element] = None
    exit_code: Optional[int] = None


@dataclass(frozen=True)
class StepResult:
    """One step parsed from the detailed XML report."""

    status: ExecutionStatus
    description: str
    actual_result: str
    position: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "position": self.position,
            "status": self.status.value,
            "description": self.description,
            "actual_result": self.actual_result,
        }


@dataclass(frozen=True)
class ConsoleSummary:
    """Counts extracted from the testrunner console summary."""

    steps: int = 0
    assertions: int = 0
    failed_assertions: int = 0
    failed_test_cases: int = 0

    @property
    def status(self) -> ExecutionStatus:
        if self.failed_assertions > 0 or self.failed_test_cases > 0:
            return ExecutionStatus.FAILED
        return ExecutionStatus.PASSED

    @property
    def message(self) -> str:
        return (
            f"{self.steps} test steps completed with {self.assertions} request assertions, "
            f"{self.failed_assertions} failed assertions and "
            f"{self.failed_test_cases} failed test cases."
        )


@dataclass
class RunResult:
    """Normalized outcome of one run."""

    status: ExecutionStatus
    message: str
    console_output: str
    failed_assertion_count: int
    summary: ConsoleSummary = field(default_factory=ConsoleSummary)
    steps: List[StepResult] = field(default_factory=list)

    @property
    def failed_steps(self) -> List[StepResult]:
        return [s for s in self.steps if s.status == ExecutionStatus.FAILED]


# ============================================================================
# Host-facing test run record
# ============================================================================


@dataclass
class TestRunParameter:
    """A named parameter value the host passes with a test run."""

    __test__ = False

    name: str
    value: Optional[str] = None


@dataclass
class AutomatedTestRun:
    """
    The test run record exchanged with the host.

    The host fills in the request fields; the engine fills in the results.
    """

    filename_or_url: str
    type: AttachmentType = AttachmentType.URL
    parameters: Optional[List[TestRunParameter]] = None

    # Populated by the engine
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    runner_name: str = "SoapUI"
    runner_test_name: Optional[str] = None
    execution_status: ExecutionStatus = ExecutionStatus.NOT_RUN
    runner_message: Optional[str] = None
    runner_stack_trace: Optional[str] = None
    runner_assert_count: int = 0
    test_run_steps: Optional[List[StepResult]] = None

    @property
    def duration(self) -> Optional[float]:
        if self.start_date is None or self.end_date is None:
            return None
        return (self.end_date - self.start_date).total_seconds()

    def apply_result(self, result: RunResult) -> None:
        """Copy a parsed RunResult onto this record."""
        self.execution_status = result.status
        self.runner_message = result.message
        self.runner_stack_trace = result.console_output
        self.runner_assert_count = result.failed_assertion_count
        self.test_run_steps = list(result.steps)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "filename_or_url": self.filename_or_url,
            "type": self.type.value,
            "runner_name": self.runner_name,
            "runner_test_name": self.runner_test_name,
            "execution_status": self.execution_status.value,
            "execution_status_id": self.execution_status.status_id,
            "runner_message": self.runner_message,
            "runner_assert_count": self.runner_assert_count,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "duration_seconds": round(self.duration, 3) if self.duration is not None else None,
            "test_run_steps": [s.to_dict() for s in self.test_run_steps or []],
            "runner_stack_trace": self.runner_stack_trace,
        }
