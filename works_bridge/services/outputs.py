"""
Run output sinks.

Outputs are written to the runner's ``GITHUB_OUTPUT`` file when one is
configured; otherwise they fall back to the ``::set-output`` workflow
command. The in-memory sink serves the webhook receiver and tests.
"""

import sys
import uuid
from abc import ABC, abstractmethod
from typing import Dict, Optional, TextIO

from works_bridge.utils.logging import get_logger


logger = get_logger(__name__)


def escape_data(value: str) -> str:
    """Escape a workflow command message."""
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def escape_property(value: str) -> str:
    """Escape a workflow command property value."""
    return escape_data(value).replace(":", "%3A").replace(",", "%2C")


class OutputSink(ABC):
    """Destination for named run outputs."""

    @abstractmethod
    def set_output(self, name: str, value: str) -> None:
        """Record one output value."""


class InMemoryOutputSink(OutputSink):
    """Keeps outputs in a dict."""

    def __init__(self):
        self.values: Dict[str, str] = {}

    def set_output(self, name: str, value: str) -> None:
        self.values[name] = value


class GitHubOutputSink(OutputSink):
    """Writes outputs the way the Actions runner expects them."""

    def __init__(self, output_path: Optional[str] = None, stream: Optional[TextIO] = None):
        """
        Args:
            output_path: Path of the runner's GITHUB_OUTPUT file
            stream: Stream for workflow commands (defaults to stdout)
        """
        self.output_path = output_path
        self.stream = stream or sys.stdout

    def set_output(self, name: str, value: str) -> None:
        if self.output_path:
            delimiter = f"ghadelimiter_{uuid.uuid4()}"
            with open(self.output_path, "a", encoding="utf-8") as fh:
                fh.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
        else:
            self.stream.write(f"\n::set-output name={escape_property(name)}::{escape_data(value)}\n")
        logger.debug(f"Output set: {name}")


def report_failure(message: str, stream: Optional[TextIO] = None) -> None:
    """Report a run failure as an ``::error::`` workflow command."""
    (stream or sys.stdout).write(f"::error::{escape_data(message)}\n")
