"""Result parsing for SOAP-UI runner output."""

from .parser import (
    escalate_status,
    parse_console_summary,
    parse_results,
    parse_step_results,
)

__all__ = [
    "escalate_status",
    "parse_console_summary",
    "parse_results",
    "parse_step_results",
]
