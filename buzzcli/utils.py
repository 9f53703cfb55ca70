import json
import logging
import os
from datetime import datetime
from typing import Any, Dict, Optional


def env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value in ("1", "true", "TRUE", "yes")


def env_float(name: str, default: Optional[float] = None) -> Optional[float]:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter('%(levelname)s %(message)s')
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if env_bool("BUZZHEAVIER_DEBUG") else logging.INFO)
    return logger


def redacted_headers(headers: Dict[str, Any]) -> Dict[str, Any]:
    redacted = {}
    for k, v in headers.items():
        if k.lower() == 'authorization':
            redacted[k] = '[REDACTED]'
        else:
            redacted[k] = v
    return redacted


def append_log_line(path: str, line: str) -> None:
    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    safe_line = line.rstrip("\n")
    with open(path, "a", encoding="utf-8") as handle:
        handle.write(f"[{timestamp}] {safe_line}\n")


def truncate_text(text: str, limit: int = 2000) -> str:
    if text is None:
        return ""
    if len(text) <= limit:
        return text
    return f"{text[:limit]}...[truncated {len(text) - limit} chars]"


def format_bytes(num: int) -> str:
    step = 1024.0
    units = ['B', 'KB', 'MB', 'GB', 'TB']
    size = float(num)
    for unit in units:
        if size < step:
            return f"{size:.2f}{unit}"
        size /= step
    return f"{size:.2f}PB"


def render_body(content: bytes) -> str:
    """Pretty-print a JSON body, or return the text unchanged if it is not JSON."""
    if not content:
        return ""
    text = content.decode("utf-8", errors="replace")
    try:
        payload = json.loads(text)
    except ValueError:
        return text.rstrip("\n")
    return json.dumps(payload, indent=2, ensure_ascii=False)
