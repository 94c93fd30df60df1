"""
Result parsing for SOAP-UI runner output.

Two sources are combined into one RunResult:

Console summary (every run), e.g.:

    SoapUI 3.6.1 TestCaseRunner Summary
    -----------------------------
    Time Taken: 837ms
    Total TestSuites: 0
    Total TestCases: 1 (0 failed)
    Total TestSteps: 3
    Total Request Assertions: 6
    Total Failed Assertions: 0
    Total Exported Results: 3

Data Export XML (pro license only), one of:

    <TestCaseTestStepResults>
      <result>
        <message>Step 0 [Authenticate] OK: took 617 ms</message>
        <name>Authenticate</name>
        <order>1</order>
        <started>23:03:30.871</started>
        <status>OK</status>
        <timeTaken>617</timeTaken>
      </result>
    </TestCaseTestStepResults>

    <LoadTestLog>
      <entry>
        <discarded>false</discarded>
        <error>true</error>
        <message>TestStep [tc13] result status is FAILED; ...</message>
        <targetStepName>tc13</targetStepName>
        <timeStamp>1403573495573</timeStamp>
        <type>Step Status</type>
      </entry>
    </LoadTestLog>

Everything here is a pure function of text / parsed XML.
"""
import logging
import re
from typing import Dict, List, Optional
from xml.etree.ElementTree import Element

from soapui_engine.types import (
    ConsoleSummary,
    ExecutionStatus,
    RawOutput,
    RunResult,
    StepResult,
)

logger = logging.getLogger(__name__)

STEPS_PREFIX = "Total TestSteps:"
ASSERTIONS_PREFIX = "Total Request Assertions:"
FAILED_ASSERTIONS_PREFIX = "Total Failed Assertions:"
TEST_CASES_PATTERN = re.compile(r"^Total TestCases: (\d+) \((\d+) failed\)")

FUNCTIONAL_ROOT = "TestCaseTestStepResults"
FUNCTIONAL_NODE = "result"
LOAD_TEST_ROOT = "LoadTestLog"
LOAD_TEST_NODE = "entry"

# Statuses a step failure is allowed to overwrite
NOT_YET_FAILED = (
    ExecutionStatus.PASSED,
    ExecutionStatus.NOT_RUN,
    ExecutionStatus.CAUTION,
)


def _parse_int(value: str) -> Optional[int]:
    try:
        return int(value.strip())
    except ValueError:
        return None


def parse_console_summary(output: str) -> ConsoleSummary:
    """
    Extract the counts from the testrunner console summary.

    Lines may appear in any order and among unrelated output. A value that
    is not an integer leaves the count at its previous value.
    """
    counts: Dict[str, int] = {
        "steps": 0,
        "assertions": 0,
        "failed_assertions": 0,
        "failed_test_cases": 0,
    }
    prefixes = {
        STEPS_PREFIX: "steps",
        ASSERTIONS_PREFIX: "assertions",
        FAILED_ASSERTIONS_PREFIX: "failed_assertions",
    }

    for raw_line in output.split("\n"):
        line = raw_line.rstrip("\r")

        for prefix, key in prefixes.items():
            if line.startswith(prefix):
                value = _parse_int(line[len(prefix):])
                if value is not None:
                    counts[key] = value

        if match := TEST_CASES_PATTERN.match(line):
            counts["failed_test_cases"] = int(match.group(2))

    return ConsoleSummary(**counts)


def _child_text(node: Element, name: str) -> Optional[str]:
    """Full text of a child element, or None if the child is missing."""
    child = node.find(name)
    if child is None:
        return None
    return "".join(child.itertext())


def _select_nodes(root: Element, root_tag: str, node_tag: str) -> List[Element]:
    if root.tag != root_tag:
        logger.warning(f"Expected <{root_tag}> report but found <{root.tag}>")
        return []
    return root.findall(node_tag)


def parse_load_test_steps(root: Element) -> List[StepResult]:
    """Build one step per LoadTestLog entry."""
    steps: List[StepResult] = []
    for index, entry in enumerate(_select_nodes(root, LOAD_TEST_ROOT, LOAD_TEST_NODE), start=1):
        message = _child_text(entry, "message")
        entry_type = _child_text(entry, "type")
        error = _child_text(entry, "error")
        if message is None or entry_type is None or error is None:
            logger.warning(f"Skipping load test log entry {index}: missing message, type or error")
            continue

        target_step_name = _child_text(entry, "targetStepName") or ""
        steps.append(StepResult(
            status=ExecutionStatus.FAILED if error == "true" else ExecutionStatus.PASSED,
            description=f"{entry_type}: {target_step_name}",
            actual_result=message,
            position=len(steps) + 1,
        ))
    return steps


def parse_functional_steps(root: Element) -> List[StepResult]:
    """Build one step per TestCaseTestStepResults result."""
    steps: List[StepResult] = []
    for index, result in enumerate(_select_nodes(root, FUNCTIONAL_ROOT, FUNCTIONAL_NODE), start=1):
        message = _child_text(result, "message")
        status = _child_text(result, "status")
        if message is None or status is None:
            logger.warning(f"Skipping test step result {index}: missing message or status")
            continue

        steps.append(StepResult(
            status=ExecutionStatus.PASSED if status == "OK" else ExecutionStatus.FAILED,
            description=message,
            actual_result=status,
            position=len(steps) + 1,
        ))
    return steps


def parse_step_results(root: Element, is_load_test: bool) -> List[StepResult]:
    """Parse the Data Export report matching the run mode."""
    if is_load_test:
        return parse_load_test_steps(root)
    return parse_functional_steps(root)


def escalate_status(status: ExecutionStatus, steps: List[StepResult]) -> ExecutionStatus:
    """A failed step turns a not-yet-failed status into Failed, never the reverse."""
    if status in NOT_YET_FAILED and any(s.status == ExecutionStatus.FAILED for s in steps):
        return ExecutionStatus.FAILED
    return status


def parse_results(
    raw: RawOutput,
    is_load_test: bool = False,
    expects_detailed_export: bool = False,
) -> RunResult:
    """
    Combine console summary and optional XML report into a RunResult.

    Args:
        raw: Captured console text and XML document
        is_load_test: Select the LoadTestLog schema instead of TestCaseTestStepResults
        expects_detailed_export: Pro license run; a missing document is logged

    Returns:
        The normalized run result
    """
    summary = parse_console_summary(raw.console_output)
    status = summary.status
    steps: List[StepResult] = []

    if raw.xml_document is not None:
        steps = parse_step_results(raw.xml_document, is_load_test)
        status = escalate_status(status, steps)
    elif expects_detailed_export:
        logger.error("Unable to access the SOAP-UI Pro Detailed XML Log File")

    return RunResult(
        status=status,
        message=summary.message,
        console_output=raw.console_output,
        failed_assertion_count=summary.failed_assertions,
        summary=summary,
        steps=steps,
    )
