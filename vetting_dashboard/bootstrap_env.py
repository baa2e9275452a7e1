"""
Environment bootstrap imported first by app.py.

Streamlit secrets become uppercase environment variables (nested sections
joined with underscores), a GOOGLE_CREDENTIALS_JSON secret is written to a
temp file referenced by GOOGLE_APPLICATION_CREDENTIALS, and `.env` is loaded
last without overriding anything already set.
"""

from __future__ import annotations

import json
import os
import re
import tempfile
from typing import Any, Iterator, Mapping, Optional, Tuple

import streamlit as st
from dotenv import load_dotenv

CREDENTIALS_FILE_NAME = "vetting-dashboard-credentials.json"


def _sanitize_key(key: str) -> str:
    # Uppercase and replace non-alphanumeric with underscores
    return re.sub(r"[^A-Za-z0-9_]", "_", key.upper())


def _flatten_secrets(prefix: str, val: Any) -> Iterator[Tuple[str, str]]:
    if isinstance(val, Mapping):
        for k, v in val.items():
            yield from _flatten_secrets(f"{prefix}_{k}", v)
    else:
        yield _sanitize_key(prefix), str(val)


def _secrets_dict() -> dict:
    # st.secrets raises when no secrets.toml exists outside Streamlit Cloud
    try:
        items = getattr(st, "secrets", None)
        if not items:
            return {}
        return items.to_dict()  # type: ignore[attr-defined]
    except Exception:
        # Ignore in non-Streamlit or if secrets unavailable
        return {}


def _bridge_secrets_to_env(secrets: Mapping[str, Any]) -> None:
    for key, value in secrets.items():
        if key == "GOOGLE_CREDENTIALS_JSON":
            continue
        for flat_k, flat_v in _flatten_secrets(key, value):
            os.environ.setdefault(flat_k, flat_v)


def _credentials_json(secrets: Mapping[str, Any]) -> Optional[str]:
    creds = secrets.get("GOOGLE_CREDENTIALS_JSON")
    if not creds:
        return None
    if isinstance(creds, Mapping):
        return json.dumps(dict(creds))
    try:
        json.loads(str(creds))
    except ValueError:
        return None
    return str(creds)


def _materialize_google_credentials(secrets: Mapping[str, Any]) -> None:
    """Create a temp service account file from secrets if needed.

    An existing GOOGLE_APPLICATION_CREDENTIALS path that exists is kept.
    """
    existing_path = os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
    if existing_path and os.path.exists(existing_path):
        return
    json_text = _credentials_json(secrets)
    if not json_text:
        return
    tmp_path = os.path.join(tempfile.gettempdir(), CREDENTIALS_FILE_NAME)
    with open(tmp_path, "w", encoding="utf-8") as f:
        f.write(json_text)
    os.environ["GOOGLE_APPLICATION_CREDENTIALS"] = tmp_path


def ensure_env() -> None:
    """Idempotent: make sure env vars and creds are available.
    Safe to call multiple times, both inside and outside Streamlit runtime.
    """
    secrets = _secrets_dict()
    _bridge_secrets_to_env(secrets)
    _materialize_google_credentials(secrets)
    # load_dotenv will not override existing env vars by default
    load_dotenv()


# Execute on import for Streamlit main process, but also allow explicit calls elsewhere.
ensure_env()
