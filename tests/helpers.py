"""Fakes for the external collaborators of the lifecycle controller.

- FakeCommandRunner: records docker/git invocations and returns canned output
- MutableNodeInfoProvider: a host network query whose answer tests can change
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from explorer_module.errors import CommandError
from explorer_module.lifecycle import NetworkDescriptor
from explorer_module.lifecycle.process import CommandResult

PROJECT_NAME = "zkcli-block-explorer"
SEEDED_VERSION = "v2.5.0"


def _normalize(args: list[str]) -> str:
    """Join a command line, dropping the `-f <compose file>` pair."""
    tokens = list(args)
    if "-f" in tokens and tokens[:2] == ["docker", "compose"]:
        index = tokens.index("-f")
        del tokens[index : index + 2]
    return " ".join(tokens)


@dataclass
class FakeCommandRunner:
    """Command runner that matches invocations by substring.

    Register responses with `on("compose ps", stdout=...)`; the longest
    registered pattern contained in the joined command line wins.
    Unmatched commands succeed with empty output.
    """

    calls: list[list[str]] = field(default_factory=list)
    responses: dict[str, tuple[str, Exception | None]] = field(default_factory=dict)

    def on(self, pattern: str, stdout: str = "", error: Exception | None = None) -> None:
        self.responses[pattern] = (stdout, error)

    def commands(self) -> list[str]:
        """Recorded invocations as joined command lines."""
        return [_normalize(call) for call in self.calls]

    def called(self, pattern: str) -> bool:
        return any(pattern in command for command in self.commands())

    async def run(self, args: list[str], cwd: Path | None = None, check: bool = True):
        self.calls.append(list(args))
        command = _normalize(args)
        for pattern in sorted(self.responses, key=len, reverse=True):
            if pattern in command:
                stdout, error = self.responses[pattern]
                if error is not None:
                    raise error
                return CommandResult(args=list(args), returncode=0, stdout=stdout)
        return CommandResult(args=list(args), returncode=0)


class MutableNodeInfoProvider:
    """Node-info provider whose network tests can switch."""

    def __init__(self, network: NetworkDescriptor):
        self.network = network
        self.calls = 0

    async def get_node_info(self) -> NetworkDescriptor:
        self.calls += 1
        return self.network


def command_error(stderr: str = "boom", returncode: int = 1) -> CommandError:
    """Build a CommandError as CommandRunner would raise it."""
    return CommandError(
        message=f"Command failed ({returncode}): {stderr}",
        returncode=returncode,
        stderr=stderr,
    )


def ps_line(service: str, state: str, project: str = PROJECT_NAME) -> str:
    """One line of `docker compose ps --format json` output."""
    return f'{{"Service":"{service}","Name":"{project}-{service}-1","State":"{state}"}}'
