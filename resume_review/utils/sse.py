from __future__ import annotations

import json
from typing import Any


def sse(event: str, data: Any) -> str:
    """Format one server-sent event; non-string data is JSON encoded."""
    payload = data if isinstance(data, str) else json.dumps(data, ensure_ascii=False)
    lines = payload.split("\n")
    body = "\n".join(f"data: {line}" for line in lines)
    return f"event: {event}\n{body}\n\n"
