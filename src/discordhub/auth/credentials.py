"""Persistent storage for the DiscordHub API key.

The key is kept in ``~/.config/discordhub/credentials.json`` with
permissions restricted to the owner (0o600).  It is written by
``dhub auth setup`` and removed by ``dhub auth clear``.
"""

import json
from pathlib import Path

_CONFIG_DIR = Path.home() / ".config" / "discordhub"
_CREDENTIALS_FILE = _CONFIG_DIR / "credentials.json"


def save(api_key: str) -> None:
    """Persist the API key to the config file.

    Creates the config directory if it does not already exist and restricts
    file permissions to the owner only.

    Args:
        api_key: The DiscordHub API key.
    """
    _CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    _CREDENTIALS_FILE.write_text(
        json.dumps({"api_key": api_key}, indent=2),
        encoding="utf-8",
    )
    _CREDENTIALS_FILE.chmod(0o600)


def load() -> str | None:
    """Load the API key from the config file.

    Returns:
        The stored key, or ``None`` if no credentials file exists, it
        cannot be parsed, or it holds no key.
    """
    if not _CREDENTIALS_FILE.exists():
        return None
    try:
        data = json.loads(_CREDENTIALS_FILE.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError):
        return None
    if not isinstance(data, dict):
        return None
    return data.get("api_key") or None


def clear() -> bool:
    """Remove the credentials file.

    Returns:
        ``True`` if the file was deleted, ``False`` if it did not exist.
    """
    if _CREDENTIALS_FILE.exists():
        _CREDENTIALS_FILE.unlink()
        return True
    return False


def credentials_path() -> Path:
    """Return the path to the credentials file."""
    return _CREDENTIALS_FILE
