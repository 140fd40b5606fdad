"""SSH public key resolution for Cloud-Init injection."""

from __future__ import annotations

import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional


def resolve_ssh_key(raw: str) -> Optional[str]:
    """Resolve the form's SSH key field to literal key material.

    The field holds either a path (``~`` allowed) to a public key file or
    the key text itself.  Returns None when the field is empty.
    """
    if not raw:
        return None

    path = Path(os.path.expanduser(raw))
    try:
        if path.is_file() and os.access(path, os.R_OK):
            return path.read_text().rstrip("\r\n")
    except (OSError, ValueError):
        # Not a usable path (too long, bad characters); treat as key text
        pass
    return raw


@contextmanager
def ssh_key_file(material: Optional[str]) -> Iterator[Optional[str]]:
    """Write key material to a private temp file for ``qm set --sshkeys``.

    Yields the file path, or None when there is no key.  The file is written
    without a trailing newline (qm rejects the key otherwise) and removed on
    exit no matter how the block ends.
    """
    if not material:
        yield None
        return

    fd, path = tempfile.mkstemp(prefix="pmxdeploy-sshkey-", suffix=".pub")
    try:
        with os.fdopen(fd, "w") as f:
            f.write(material)
        yield path
    finally:
        try:
            os.unlink(path)
        except FileNotFoundError:
            pass
