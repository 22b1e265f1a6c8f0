"""Parsing for the agent's `stream-json` output.

Each stdout line is a JSON object. Only two chunk kinds carry answer text:
    {"type": "text", "text": "..."}
    {"type": "content", "content": "..."}
Everything else (tool events, blank or non-JSON lines) is ignored.
"""

import json
from typing import Iterable, Optional

CHUNK_FIELDS = {
    "text": "text",
    "content": "content",
}

def parse_stream_line(line: str) -> Optional[str]:
    line = line.strip()
    if not line:
        return None
    try:
        chunk = json.loads(line)
    except json.JSONDecodeError:
        return None
    if not isinstance(chunk, dict):
        return None
    field = CHUNK_FIELDS.get(chunk.get("type"))
    if field is None:
        return None
    value = chunk.get(field)
    return value if isinstance(value, str) and value else None

def collect_stream_text(lines: Iterable[str]) -> str:
    """Concatenate recognised chunks in arrival order."""
    return "".join(part for part in map(parse_stream_line, lines) if part)
