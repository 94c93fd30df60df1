"""SOAP-UI engine implementation.

Drives the SOAP-UI command-line runner for a host test run:
validate locator → resolve placeholders → build command → run → parse → populate.

Usage:
    engine = SoapUIEngine(EngineSettings(location="/opt/SoapUI-5.1.1/bin"))
    run = AutomatedTestRun(
        filename_or_url="[MyDocuments]/project.xml|Requirements Testing|Get Requirements",
    )
    engine.start_execution(run)
    print(run.execution_status, run.runner_message)

Only one run at a time: every run wipes the shared output folder.
"""

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, Optional

from soapui_engine.config import EngineSettings
from soapui_engine.core.parser import parse_results
from soapui_engine.environments.executor import SoapUIExecutor
from soapui_engine.exceptions import ValidationError
from soapui_engine.types import (
    AttachmentType,
    AutomatedTestRun,
    EngineStatus,
    ExecutionStatus,
    RunRequest,
    RunState,
    TestLocator,
)
from soapui_engine.utils.commands import dedupe_parameters
from soapui_engine.utils.special_folders import resolve_placeholders

from .base import BaseEngine

logger = logging.getLogger(__name__)

LOCATOR_SEPARATOR = "|"


def parse_locator(filename_or_url: str) -> TestLocator:
    """Split a ``project|suite|case[|switches]`` locator.

    Raises:
        ValidationError: If there are not exactly three or four fields
    """
    elements = filename_or_url.split(LOCATOR_SEPARATOR)
    if len(elements) < 3:
        raise ValidationError(
            "You need to provide a project file, test suite and test case name separated by "
            f"pipe (|) characters. Only {len(elements)} elements were provided."
        )
    if len(elements) > 4:
        raise ValidationError(
            "Expected a project file, test suite, test case and optional command-line switches "
            f"separated by pipe (|) characters, but {len(elements)} elements were provided."
        )

    return TestLocator(
        project_path=elements[0],
        test_suite=elements[1],
        test_case=elements[2],
        extra_switches=elements[3] if len(elements) > 3 else None,
    )


class SoapUIEngine(BaseEngine):
    """Automation engine for SmartBear SOAP-UI (free and pro, functional and load)."""

    extension_id = "6DCE96C2-33E8-42D9-ABD9-93BF1A0896E2"
    extension_name = "SOAP-UI Automation Engine"
    extension_token = "SoapUI"
    extension_version = "4.0.1"
    extension_author = "Inflectra Corporation"

    def __init__(
        self,
        settings: EngineSettings,
        executor_factory: Optional[Callable[[EngineSettings], SoapUIExecutor]] = None,
        special_folders: Optional[Dict[str, str]] = None,
    ) -> None:
        """Initialize the engine.

        Args:
            settings: Tool location and license/load-test/trace flags
            executor_factory: Builds the process executor (swapped out in tests)
            special_folders: Placeholder → folder overrides for project paths
        """
        super().__init__()
        self.settings = settings
        self.state = RunState.IDLE
        self._executor_factory = executor_factory or _default_executor
        self._special_folders = special_folders

    def start_execution(
        self,
        automated_test_run: AutomatedTestRun,
        project_id: Optional[int] = None,
    ) -> AutomatedTestRun:
        """Run the linked SOAP-UI test case and populate the test run.

        Raises:
            ValidationError: If the run or its locator is invalid
            LaunchError: If the runner could not be started
        """
        self.status = EngineStatus.OK
        self.state = RunState.VALIDATING

        try:
            self._trace("SoapUIEngine.start_execution: Entering")

            if automated_test_run is None:
                raise ValidationError("The automated test run provided was null")

            request = self._build_request(automated_test_run)

            self.state = RunState.RUNNING
            executor = self._executor_factory(self.settings)
            start_date = datetime.now(timezone.utc)
            raw = executor.execute(request)
            end_date = datetime.now(timezone.utc)

            self.state = RunState.PARSING
            result = parse_results(
                raw,
                is_load_test=request.is_load_test,
                expects_detailed_export=request.supports_detailed_export,
            )

            automated_test_run.start_date = start_date
            automated_test_run.end_date = end_date
            automated_test_run.runner_test_name = request.display_name
            automated_test_run.apply_result(result)

            self._trace(
                f"SoapUIEngine.start_execution: Exiting with status {result.status.value} "
                f"({len(result.steps)} detailed steps)"
            )
            self.state = RunState.DONE
            self.status = EngineStatus.OK
            return automated_test_run

        except Exception as e:
            self.state = RunState.FAILED if isinstance(e, ValidationError) else RunState.ERROR
            self.status = EngineStatus.ERROR
            if automated_test_run is not None:
                automated_test_run.execution_status = ExecutionStatus.FAILED
            logger.exception(f"SOAP-UI test run failed: {e}")
            raise

    def _build_request(self, automated_test_run: AutomatedTestRun) -> RunRequest:
        """Validate the host run and turn it into a RunRequest."""
        # SOAP-UI projects are XML files that cannot be edited inline in the host
        if automated_test_run.type != AttachmentType.URL:
            raise ValidationError("The SOAP-UI automation engine only supports linked test scripts")

        locator = parse_locator(automated_test_run.filename_or_url)

        path = resolve_placeholders(locator.project_path, self._special_folders)
        # A composite project is a directory rather than a file
        if not Path(path).exists():
            raise ValidationError(f"The provided project filepath '{path}' does not exist on the host!")

        if automated_test_run.parameters is None:
            self._trace("Test Run has no parameters")
            parameters: Dict[str, str] = {}
        else:
            self._trace("Test Run has parameters")
            parameters = dedupe_parameters(
                (p.name, p.value) for p in automated_test_run.parameters
            )
            for name, value in parameters.items():
                self._trace(f"Adding test run parameter {name} = {value}")

        return RunRequest(
            working_directory=self.settings.location,
            project_path=path,
            test_suite=locator.test_suite,
            test_case=locator.test_case,
            extra_switches=locator.extra_switches,
            parameters=parameters,
            supports_detailed_export=self.settings.pro_license,
            is_load_test=self.settings.load_test,
            trace_logging=self.settings.trace_logging,
        )

    def _trace(self, message: str) -> None:
        if self.settings.trace_logging:
            logger.info(message)


def _default_executor(settings: EngineSettings) -> SoapUIExecutor:
    output_folder = Path(os.path.expanduser(settings.output_folder)) if settings.output_folder else None
    return SoapUIExecutor(output_folder=output_folder)
