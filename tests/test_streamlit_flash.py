"""Staff console confirmation message tests."""

from streamlit_app.flash import pop_flash, set_flash


def test_flash_message_is_shown_once_after_rerun() -> None:
    state: dict[str, object] = {}

    set_flash(state, "Token #7: Order marked as preparing")

    assert pop_flash(state) == "Token #7: Order marked as preparing"
    assert pop_flash(state) is None


def test_latest_flash_message_wins() -> None:
    state: dict[str, object] = {"ctx_STAFF": object()}

    set_flash(state, "Token #7: Order marked as preparing")
    set_flash(state, "Token #8: Order marked as ready")

    assert pop_flash(state) == "Token #8: Order marked as ready"
    assert "ctx_STAFF" in state
