"""External collaborators.

- runner: Runs composer/php/git/gh/npm with interrupt-driven cancellation
- network: TCP port availability check
"""

from larinit.integrations.network import is_port_available
from larinit.integrations.runner import CancellationToken, CommandRecord, ProcessRunner, handle_interrupts

__all__ = [
    "CancellationToken",
    "CommandRecord",
    "ProcessRunner",
    "handle_interrupts",
    "is_port_available",
]
