import os
import re
from pathlib import Path
from typing import Optional, Union

from .errors import InvalidArgument, MissingCredential

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "buzzheavier-cli" / "config"
TOKEN_KEY = "ACCOUNT_ID"

_TOKEN_LINE = re.compile(rf"""^\s*(?:export\s+)?{TOKEN_KEY}=(?:"((?:[^"\\]|\\.)*)"|'([^']*)'|(\S*))\s*$""")
_ESCAPED = re.compile(r"\\(.)")
_NEEDS_ESCAPE = re.compile(r'([\\"$`])')


def config_path_from_env() -> Path:
    override = os.getenv("BUZZHEAVIER_CONFIG")
    if override:
        return Path(override).expanduser()
    return DEFAULT_CONFIG_PATH


def save_token(path: Union[str, Path], token: Optional[str]) -> Path:
    if token is None or not token.strip():
        raise InvalidArgument("You must provide a token.")
    if token.splitlines() != [token]:
        raise InvalidArgument("Token must be a single line.")
    config_path = Path(path)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    escaped = _NEEDS_ESCAPE.sub(r"\\\1", token)
    config_path.write_text(f'{TOKEN_KEY}="{escaped}"\n', encoding="utf-8")
    os.chmod(config_path, 0o600)
    return config_path


def load_token(path: Union[str, Path]) -> Optional[str]:
    config_path = Path(path)
    if not config_path.is_file():
        return None
    try:
        lines = config_path.read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError):
        return None
    token = None
    for line in lines:
        match = _TOKEN_LINE.match(line)
        if not match:
            continue
        quoted, single, bare = match.groups()
        if quoted is not None:
            token = _ESCAPED.sub(r"\1", quoted)
        else:
            token = single if single is not None else bare
    return token or None


def resolve_token(
    stored: Optional[str],
    explicit: Optional[str] = None,
    config_path: Union[str, Path] = DEFAULT_CONFIG_PATH,
) -> str:
    if explicit:
        return explicit
    if stored:
        return stored
    raise MissingCredential(str(config_path))
