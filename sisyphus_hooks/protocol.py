"""
Hook boundary protocol.

One JSON document in on stdin, one JSON line out on stdout, exit code 0.

    UserPromptSubmit -> {"continue": true[, "message": "<directive>"]}
    Stop             -> {"continue": true} | {"continue": false, "reason": "..."}

Every failure resolves to {"continue": true}: a broken hook must never wedge
the session, and the payload has no error field to report through.
"""

import json
import logging
import sys
from dataclasses import dataclass
from typing import BinaryIO, Callable, Optional, TextIO

from sisyphus_hooks.config import MAX_PAYLOAD_BYTES

logger = logging.getLogger(__name__)

DRAIN_CHUNK_BYTES = 64 * 1024


@dataclass(frozen=True)
class ContinuationDecision:
    continue_: bool = True
    message: Optional[str] = None
    reason: Optional[str] = None

    def __post_init__(self) -> None:
        if self.message is not None and self.reason is not None:
            raise ValueError("A decision carries a message or a reason, never both")
        if self.reason is not None and self.continue_:
            raise ValueError("A reason is only given when blocking")
        if self.message is not None and not self.continue_:
            raise ValueError("A message is only given when continuing")

    @classmethod
    def allow(cls) -> "ContinuationDecision":
        return cls(True)

    @classmethod
    def inject(cls, message: str) -> "ContinuationDecision":
        return cls(True, message=message)

    @classmethod
    def block(cls, reason: str) -> "ContinuationDecision":
        return cls(False, reason=reason)

    def to_dict(self) -> dict:
        data: dict = {"continue": self.continue_}
        if self.message is not None:
            data["message"] = self.message
        if self.reason is not None:
            data["reason"] = self.reason
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


ALLOW = ContinuationDecision.allow()

Handler = Callable[[bytes], ContinuationDecision]


def read_event(stream: Optional[BinaryIO] = None, limit: int = MAX_PAYLOAD_BYTES) -> bytes:
    """Read the event payload; anything past ``limit`` bytes is drained and ignored."""
    if stream is None:
        stream = sys.stdin.buffer
    data = stream.read(limit)
    if len(data) >= limit:
        logger.warning("Payload truncated at %d bytes", limit)
        # Drain the remainder
        while stream.read(DRAIN_CHUNK_BYTES):
            pass
    return data


def write_decision(decision: ContinuationDecision, stream: Optional[TextIO] = None) -> None:
    if stream is None:
        stream = sys.stdout
    stream.write(decision.to_json() + "\n")
    stream.flush()


def run_hook(
    handler: Handler,
    stdin: Optional[BinaryIO] = None,
    stdout: Optional[TextIO] = None,
) -> int:
    """Run one hook invocation, failing open on any error."""
    try:
        decision = handler(read_event(stdin))
    except Exception:
        logger.exception("Hook handler failed, allowing continuation")
        decision = ALLOW
    write_decision(decision, stdout)
    return 0
