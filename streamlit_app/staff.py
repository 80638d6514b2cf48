"""Streamlit staff console: live order queue and menu availability."""

import streamlit as st

from app.services.errors import CanteenError
from app.services.menu_service import list_menu, toggle_availability
from app.services.order_queries import list_active_orders
from app.services.order_status import STATUS_MESSAGES, advance, available_actions, status_badge
from streamlit_app.common import get_session, login_form, now_string
from streamlit_app.flash import pop_flash, set_flash

st.set_page_config(page_title="Staff", layout="wide")
st.title("Canteen / Staff")

ctx = login_form("STAFF")
if ctx is None:
    st.info("Log in with a staff account.")
    st.stop()

flash = pop_flash(st.session_state)
if flash:
    st.success(flash)

if st.button("Refresh"):
    st.rerun()
st.caption(f"Last refresh: {now_string()}")

with get_session() as db:
    st.subheader("Order queue")
    for order in list_active_orders(db):
        label, _ = status_badge(order.status)
        cols = st.columns([1, 3, 1, 1])
        cols[0].markdown(f"**Token #{order.token_number}**")
        cols[1].write(", ".join(f"{item.name} × {item.quantity}" for item in order.items) + f" · {order.time_slot}")
        cols[2].write(f"{label} · {order.payment_status}")
        for action in available_actions(order.status):
            if cols[3].button(action.title(), key=f"{order.id}_{action}"):
                try:
                    advance(db, ctx, order.id, action)
                except CanteenError as exc:
                    st.error(str(exc))
                else:
                    set_flash(st.session_state, f"Token #{order.token_number}: {STATUS_MESSAGES[action]}")
                    st.rerun()

    st.subheader("Menu availability")
    for item in list_menu(db):
        cols = st.columns([3, 1])
        cols[0].write(f"{item.name} - ₹{item.price}")
        if cols[1].toggle("Available", value=item.is_available, key=f"avail_{item.id}") != item.is_available:
            try:
                toggle_availability(db, item.id)
            except CanteenError as exc:
                st.error(str(exc))
            else:
                st.rerun()
