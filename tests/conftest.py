"""Pytest configuration and fixtures for soapui_engine tests."""

import os
import stat
import xml.etree.ElementTree as ET
from pathlib import Path
from textwrap import dedent
from typing import Callable, Optional

import pytest

from soapui_engine.config import EngineSettings
from soapui_engine.types import RunRequest
from soapui_engine.utils.commands import runner_script_name


PASSING_CONSOLE = dedent("""\
    SoapUI 3.6.1 TestCaseRunner Summary
    -----------------------------
    Time Taken: 837ms
    Total TestSuites: 0
    Total TestCases: 1 (0 failed)
    Total TestSteps: 3
    Total Request Assertions: 6
    Total Failed Assertions: 0
    Total Exported Results: 3
""")

FAILING_CONSOLE = dedent("""\
    SoapUI 3.6.1 TestCaseRunner Summary
    -----------------------------
    Time Taken: 1204ms
    Total TestSuites: 0
    Total TestCases: 1 (1 failed)
    Total TestSteps: 4
    Total Request Assertions: 8
    Total Failed Assertions: 2
    Total Exported Results: 4
""")

FUNCTIONAL_XML = dedent("""\
    <TestCaseTestStepResults>
      <result>
        <message>Step 0 [Authenticate] OK: took 617 ms</message>
        <name>Authenticate</name>
        <order>1</order>
        <started>23:03:30.871</started>
        <status>OK</status>
        <timeTaken>617</timeTaken>
      </result>
      <result>
        <message>Step 1 [Get Requirements] FAILED: took 212 ms</message>
        <name>Get Requirements</name>
        <order>2</order>
        <started>23:03:31.488</started>
        <status>FAILED</status>
        <timeTaken>212</timeTaken>
      </result>
      <result>
        <message>Step 2 [Disconnect] OK: took 14 ms</message>
        <name>Disconnect</name>
        <order>3</order>
        <started>23:03:31.700</started>
        <status>OK</status>
        <timeTaken>14</timeTaken>
      </result>
    </TestCaseTestStepResults>
""")

LOAD_TEST_XML = dedent("""\
    <LoadTestLog>
      <entry>
        <discarded>false</discarded>
        <error>false</error>
        <message>LoadTest started at Tue Jun 24 11:31:35 EST 2014</message>
        <timeStamp>1403573495035</timeStamp>
        <type>Message</type>
      </entry>
      <entry>
        <discarded>false</discarded>
        <error>true</error>
        <message><![CDATA[TestStep [tc13_listAccountBalanceHistoryV1] result status is FAILED; [threadIndex=0]]]></message>
        <targetStepName>tc13_listAccountBalanceHistoryV1</targetStepName>
        <timeStamp>1403573495573</timeStamp>
        <type>Step Status</type>
      </entry>
    </LoadTestLog>
""")


posix_only = pytest.mark.skipif(os.name == "nt", reason="fake runner is a POSIX shell script")


@pytest.fixture
def passing_console():
    return PASSING_CONSOLE


@pytest.fixture
def failing_console():
    return FAILING_CONSOLE


@pytest.fixture
def functional_xml():
    """Parsed functional report with three steps, the second failed."""
    return ET.fromstring(FUNCTIONAL_XML)


@pytest.fixture
def load_test_xml():
    """Parsed load test log with one message and one failed step."""
    return ET.fromstring(LOAD_TEST_XML)


@pytest.fixture
def project_file(tmp_path: Path) -> Path:
    """An (empty) SOAP-UI project file."""
    path = tmp_path / "projects" / "SpiraTest-3-0-Web-Service-soapui-project.xml"
    path.parent.mkdir(parents=True)
    path.write_text("<con:soapui-project/>")
    return path


@pytest.fixture
def run_request(tmp_path: Path, project_file: Path) -> RunRequest:
    """A free-license functional run request."""
    return RunRequest(
        working_directory=str(tmp_path / "bin"),
        project_path=str(project_file),
        test_suite="Requirements Testing",
        test_case="Get Requirements",
    )


@pytest.fixture
def fake_runner(tmp_path: Path) -> Callable[..., Path]:
    """
    Write a fake testrunner script into tmp_path/bin.

    The script records its arguments (one per line) in bin/args.txt, prints
    the given console text, and optionally writes an XML report to a path.
    """
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir(exist_ok=True)

    def _create(
        console_text: str = PASSING_CONSOLE,
        is_load_test: bool = False,
        export_file: Optional[Path] = None,
        export_xml: Optional[str] = None,
        exit_code: int = 0,
    ) -> Path:
        lines = [
            "#!/bin/sh",
            f'printf "%s\\n" "$@" > "{bin_dir / "args.txt"}"',
            "cat <<'SOAPUI_EOF'",
            console_text.rstrip("\n"),
            "SOAPUI_EOF",
        ]
        if export_file is not None and export_xml is not None:
            lines += [
                f'mkdir -p "{export_file.parent}"',
                f"cat > \"{export_file}\" <<'SOAPUI_EOF'",
                export_xml.rstrip("\n"),
                "SOAPUI_EOF",
            ]
        lines.append(f"exit {exit_code}")

        script = bin_dir / runner_script_name(is_load_test)
        script.write_text("\n".join(lines) + "\n")
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return script

    return _create


@pytest.fixture
def engine_settings(tmp_path: Path) -> EngineSettings:
    """Settings pointing at tmp_path/bin with a private output folder."""
    return EngineSettings(
        location=str(tmp_path / "bin"),
        output_folder=str(tmp_path / "output"),
    )
