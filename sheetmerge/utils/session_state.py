from __future__ import annotations

from collections.abc import Callable, MutableMapping
from copy import deepcopy
from typing import Any

SessionStore = MutableMapping[str, Any]

SESSION_DEFAULTS: dict[str, Any] = {
    "workspace": None,
    "merge_error": None,
    "decode_failures": [],
    "uploader_key": 0,
}


def _get_store(store: SessionStore | None) -> SessionStore:
    if store is not None:
        return store
    try:
        import streamlit as st  # type: ignore
    except (
        ModuleNotFoundError
    ) as error:  # pragma: no cover - Streamlit only available in app runtime
        raise RuntimeError("Streamlit session state is unavailable outside the app.") from error
    return st.session_state


def ensure_session_defaults(
    store: SessionStore | None = None,
    *,
    defaults: dict[str, Any] | None = None,
) -> SessionStore:
    """Populate default keys without overwriting existing values."""
    state = _get_store(store)
    baseline = defaults or SESSION_DEFAULTS
    for key, value in baseline.items():
        if key not in state:
            state[key] = deepcopy(value)
    return state


def update_session_state(store: SessionStore | None = None, **updates: object) -> SessionStore:
    """Update session state with provided values after defaults are ensured."""
    state = ensure_session_defaults(store)
    for key, value in updates.items():
        state[key] = value
    return state


def get_or_create(store: SessionStore | None, key: str, factory: Callable[[], Any]) -> Any:
    """Return the value stored under ``key``, building it once per session."""
    state = ensure_session_defaults(store)
    if state.get(key) is None:
        state[key] = factory()
    return state[key]


def reset_uploader(store: SessionStore | None = None) -> int:
    """Bump the uploader widget key so the file picker clears after a load."""
    state = ensure_session_defaults(store)
    state["uploader_key"] = int(state.get("uploader_key") or 0) + 1
    return state["uploader_key"]
