"""Process execution for the SOAP-UI runners."""

from .executor import ExecutionResult, SoapUIExecutor, load_export_document, read_console_output

__all__ = [
    "ExecutionResult",
    "SoapUIExecutor",
    "load_export_document",
    "read_console_output",
]
