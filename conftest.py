"""Root conftest: loads .env.test before chat_relay.config builds its settings."""
from __future__ import annotations

import os
from pathlib import Path

_env_test = Path(__file__).resolve().parent / ".env.test"
if _env_test.exists():
    for line in _env_test.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        key, _, value = line.partition("=")
        os.environ.setdefault(key.strip(), value.strip())

# Settings requires these; keep the suite importable even without .env.test.
for _key, _default in (
    ("POSTGRES_USER", "chat"),
    ("POSTGRES_PASSWORD", "chat"),
    ("POSTGRES_DB", "chat_test"),
    ("JWT_SECRET", "test-secret-with-enough-bytes-for-hs256"),
):
    os.environ.setdefault(_key, _default)
