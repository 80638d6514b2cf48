"""One-shot confirmation messages that survive ``st.rerun()``."""

from collections.abc import MutableMapping
from typing import Any

FLASH_KEY: str = "flash_message"


def set_flash(state: MutableMapping[str, Any], message: str) -> None:
    state[FLASH_KEY] = message


def pop_flash(state: MutableMapping[str, Any]) -> str | None:
    """Return the pending message once, then forget it."""
    return state.pop(FLASH_KEY, None)
