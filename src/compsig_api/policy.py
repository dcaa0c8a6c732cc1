from __future__ import annotations
from typing import Any, Sequence

"""Message-set guardrails applied before signing.

Guardrails:
- Size limits are caller policy; the tree accepts any non-empty set.
- Caller maps PermissionError to HTTP 403.
"""

from .composite import EmptyMessageSet


def enforce_message_policy(messages: Sequence[Any], max_messages: int) -> None:
    if not isinstance(messages, (list, tuple)):
        raise ValueError("messages must be an array")
    if not messages:
        raise EmptyMessageSet("message set is empty")
    if len(messages) > max_messages:
        raise PermissionError(
            f"policy denied: {len(messages)} messages exceeds limit {max_messages}"
        )
