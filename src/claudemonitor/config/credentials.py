"""Credential file access for claudemonitor."""

from __future__ import annotations

import stat
from pathlib import Path

# Claude Code writes this file on platforms without a system keychain
CLAUDE_CREDENTIALS_FILE = "~/.claude/.credentials.json"


def read_credential(path: Path) -> bytes | None:
    """Read credential file if it exists and has secure permissions."""
    if not path.exists():
        return None

    # Check permissions
    mode = path.stat().st_mode
    if mode & (stat.S_IRGRP | stat.S_IWGRP | stat.S_IROTH | stat.S_IWOTH):
        # File is readable/writable by group or others - unsafe
        return None

    return path.read_bytes()

