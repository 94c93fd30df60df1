"""Tests for console summary and Data Export parsing in soapui_engine.core.parser."""

import xml.etree.ElementTree as ET
from textwrap import dedent

import pytest

from soapui_engine.core.parser import (
    escalate_status,
    parse_console_summary,
    parse_functional_steps,
    parse_load_test_steps,
    parse_results,
    parse_step_results,
)
from soapui_engine.types import ExecutionStatus, RawOutput, StepResult


class TestConsoleSummary:
    """Tests for parse_console_summary."""

    def test_passing_summary(self, passing_console):
        summary = parse_console_summary(passing_console)

        assert summary.steps == 3
        assert summary.assertions == 6
        assert summary.failed_assertions == 0
        assert summary.failed_test_cases == 0
        assert summary.status == ExecutionStatus.PASSED

    def test_failing_summary(self, failing_console):
        summary = parse_console_summary(failing_console)

        assert summary.failed_assertions == 2
        assert summary.failed_test_cases == 1
        assert summary.status == ExecutionStatus.FAILED

    def test_zero_failures_passes(self):
        output = "Total Failed Assertions: 0\nTotal TestCases: 5 (0 failed)\n"
        assert parse_console_summary(output).status == ExecutionStatus.PASSED

    def test_failed_assertions_alone_fail(self):
        output = "Total TestCases: 5 (0 failed)\nTotal Failed Assertions: 2\n"
        assert parse_console_summary(output).status == ExecutionStatus.FAILED

    def test_failed_test_cases_alone_fail(self):
        output = "Total TestCases: 12 (10 failed)\nTotal Failed Assertions: 0\n"
        summary = parse_console_summary(output)

        assert summary.failed_test_cases == 10
        assert summary.status == ExecutionStatus.FAILED

    def test_order_and_noise_ignored(self):
        """Counts are found regardless of line order and unrelated output."""
        output = dedent("""\
            12:00:01,000 INFO  [SoapUITestCaseRunner] Running TestCase [Get Requirements]
            Total Failed Assertions: 1
            some unrelated line mentioning Total TestSteps: 99 mid-line
            Total Request Assertions: 7
            12:00:02,000 INFO  [SoapUITestCaseRunner] Finished running
            Total TestSteps: 4
        """)
        summary = parse_console_summary(output)

        assert summary.steps == 4
        assert summary.assertions == 7
        assert summary.failed_assertions == 1

    def test_windows_line_endings(self):
        output = "Total TestSteps: 3\r\nTotal TestCases: 1 (1 failed)\r\n"
        summary = parse_console_summary(output)

        assert summary.steps == 3
        assert summary.failed_test_cases == 1

    def test_unparsable_values_keep_previous(self):
        output = "Total TestSteps: 5\nTotal TestSteps: lots\nTotal Request Assertions: n/a\n"
        summary = parse_console_summary(output)

        assert summary.steps == 5
        assert summary.assertions == 0

    def test_empty_output(self):
        summary = parse_console_summary("")

        assert summary.steps == 0
        assert summary.status == ExecutionStatus.PASSED

    def test_message(self, failing_console):
        summary = parse_console_summary(failing_console)

        assert summary.message == (
            "4 test steps completed with 8 request assertions, "
            "2 failed assertions and 1 failed test cases."
        )


class TestFunctionalSteps:
    """Tests for the TestCaseTestStepResults schema."""

    def test_one_step_per_result(self, functional_xml):
        steps = parse_functional_steps(functional_xml)

        assert len(steps) == 3
        assert [s.position for s in steps] == [1, 2, 3]
        assert [s.status for s in steps] == [
            ExecutionStatus.PASSED,
            ExecutionStatus.FAILED,
            ExecutionStatus.PASSED,
        ]

    def test_description_and_actual_result(self, functional_xml):
        step = parse_functional_steps(functional_xml)[0]

        assert step.description == "Step 0 [Authenticate] OK: took 617 ms"
        assert step.actual_result == "OK"

    def test_only_exact_ok_passes(self):
        root = ET.fromstring(
            "<TestCaseTestStepResults>"
            "<result><message>a</message><status>ok</status></result>"
            "<result><message>b</message><status>UNKNOWN</status></result>"
            "</TestCaseTestStepResults>"
        )
        steps = parse_functional_steps(root)

        assert all(s.status == ExecutionStatus.FAILED for s in steps)

    def test_missing_child_skipped(self, caplog):
        """A result without a status is skipped, the rest still parse."""
        root = ET.fromstring(
            "<TestCaseTestStepResults>"
            "<result><message>no status here</message></result>"
            "<result><message>fine</message><status>OK</status></result>"
            "</TestCaseTestStepResults>"
        )
        steps = parse_functional_steps(root)

        assert len(steps) == 1
        assert steps[0].description == "fine"
        assert steps[0].position == 1
        assert "missing message or status" in caplog.text

    def test_wrong_root_yields_no_steps(self, load_test_xml):
        assert parse_functional_steps(load_test_xml) == []


class TestLoadTestSteps:
    """Tests for the LoadTestLog schema."""

    def test_error_entry_fails(self, load_test_xml):
        steps = parse_load_test_steps(load_test_xml)

        assert len(steps) == 2
        failed = steps[1]
        assert failed.status == ExecutionStatus.FAILED
        assert failed.description == "Step Status: tc13_listAccountBalanceHistoryV1"
        assert failed.actual_result.startswith("TestStep [tc13_listAccountBalanceHistoryV1]")
        assert failed.position == 2

    def test_missing_target_step_name(self, load_test_xml):
        step = parse_load_test_steps(load_test_xml)[0]

        assert step.status == ExecutionStatus.PASSED
        assert step.description == "Message: "
        assert step.actual_result == "LoadTest started at Tue Jun 24 11:31:35 EST 2014"

    def test_error_must_be_literal_true(self):
        root = ET.fromstring(
            "<LoadTestLog><entry><error>TRUE</error><message>m</message><type>t</type></entry></LoadTestLog>"
        )
        assert parse_load_test_steps(root)[0].status == ExecutionStatus.PASSED

    def test_missing_error_skipped(self):
        root = ET.fromstring(
            "<LoadTestLog>"
            "<entry><message>m</message><type>Message</type></entry>"
            "<entry><error>true</error><message>boom</message><type>Step Status</type></entry>"
            "</LoadTestLog>"
        )
        steps = parse_load_test_steps(root)

        assert len(steps) == 1
        assert steps[0].actual_result == "boom"
        assert steps[0].position == 1


class TestStepSelection:
    """Tests for picking the schema by run mode."""

    def test_load_test_mode(self, load_test_xml):
        assert len(parse_step_results(load_test_xml, is_load_test=True)) == 2

    def test_functional_mode(self, functional_xml):
        assert len(parse_step_results(functional_xml, is_load_test=False)) == 3


class TestEscalation:
    """Tests for the status precedence rule."""

    @pytest.fixture
    def failed_step(self):
        return [StepResult(ExecutionStatus.FAILED, "d", "a", 1)]

    @pytest.mark.parametrize("status", [
        ExecutionStatus.PASSED,
        ExecutionStatus.NOT_RUN,
        ExecutionStatus.CAUTION,
    ])
    def test_not_yet_failed_escalates(self, status, failed_step):
        assert escalate_status(status, failed_step) == ExecutionStatus.FAILED

    def test_blocked_left_alone(self, failed_step):
        assert escalate_status(ExecutionStatus.BLOCKED, failed_step) == ExecutionStatus.BLOCKED

    def test_never_de_escalates(self):
        passed = [StepResult(ExecutionStatus.PASSED, "d", "a", 1)]
        assert escalate_status(ExecutionStatus.FAILED, passed) == ExecutionStatus.FAILED


class TestParseResults:
    """Tests for the combined RunResult."""

    def test_console_only(self, passing_console):
        result = parse_results(RawOutput(console_output=passing_console))

        assert result.status == ExecutionStatus.PASSED
        assert result.steps == []
        assert result.console_output == passing_console
        assert result.failed_assertion_count == 0
        assert result.message.startswith("3 test steps completed")

    def test_step_failure_overrides_passing_console(self, passing_console, functional_xml):
        """One failed XML step fails the run even though the console passed."""
        raw = RawOutput(console_output=passing_console, xml_document=functional_xml)
        result = parse_results(raw, expects_detailed_export=True)

        assert len(result.steps) == 3
        assert len(result.failed_steps) == 1
        assert result.status == ExecutionStatus.FAILED

    def test_load_test_document(self, passing_console, load_test_xml):
        raw = RawOutput(console_output=passing_console, xml_document=load_test_xml)
        result = parse_results(raw, is_load_test=True, expects_detailed_export=True)

        assert result.status == ExecutionStatus.FAILED
        assert result.steps[1].description == "Step Status: tc13_listAccountBalanceHistoryV1"

    def test_missing_expected_document_logged(self, passing_console, caplog):
        result = parse_results(RawOutput(console_output=passing_console), expects_detailed_export=True)

        assert result.status == ExecutionStatus.PASSED
        assert result.steps == []
        assert "Detailed XML Log File" in caplog.text

    def test_failed_assertion_count(self, failing_console):
        result = parse_results(RawOutput(console_output=failing_console))

        assert result.failed_assertion_count == 2
        assert result.summary.failed_test_cases == 1
