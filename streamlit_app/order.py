"""Streamlit customer console: browse, checkout and track orders."""

from datetime import datetime, timedelta

import streamlit as st

from app.services.cart import Cart
from app.services.errors import CanteenError
from app.services.menu_service import list_menu
from app.services.order_queries import list_user_orders
from app.services.order_service import checkout
from app.services.order_status import status_badge
from app.services.payment import build_upi_link
from app.services.token_allocator import TokenAllocator
from app.services.wait_time_estimator import WaitTimeEstimator
from app.utils.time import canteen_zone
from streamlit_app.common import SessionLocal, get_session, login_form, now_string

st.set_page_config(page_title="Canteen", layout="centered")
st.title("Canteen / Order")

ctx = login_form("CUSTOMER")
if ctx is None:
    st.info("Log in to place an order.")
    st.stop()

cart: Cart = st.session_state.setdefault("cart", Cart())

with get_session() as db:
    st.subheader("Menu")
    for item in list_menu(db, available_only=True):
        cols = st.columns([3, 1, 1])
        cols[0].write(f"{'🟢' if item.is_veg else '🔴'} {item.name} - ₹{item.price}")
        if cols[1].button("Add", key=f"add_{item.id}"):
            cart.add_menu_item(item)
        if cols[2].button("−", key=f"dec_{item.id}"):
            cart.add(item.id, item.name, item.price, -1)

    st.subheader("Cart")
    if cart.is_empty():
        st.write("Your cart is empty.")
    for line in cart.lines:
        cols = st.columns([4, 1])
        cols[0].write(f"{line.name} × {line.quantity} = ₹{line.line_total}")
        if cols[1].button("Remove", key=f"remove_{line.item_id}"):
            cart.remove(line.item_id)
            st.rerun()
    st.write(f"Total: ₹{cart.total_price}")

    order_type = st.radio("Order type", ["INSTANT", "SCHEDULED"], horizontal=True)
    pickup_time = None
    if order_type == "SCHEDULED":
        default_pickup = datetime.now(canteen_zone()) + timedelta(minutes=30)
        pickup_day = st.date_input("Pickup date", value=default_pickup.date())
        pickup_clock = st.time_input("Pickup time", value=default_pickup.time().replace(second=0, microsecond=0))
        pickup_time = datetime.combine(pickup_day, pickup_clock)

    payment_choice = st.radio("Payment", ["online", "offline"], horizontal=True)
    if payment_choice == "online" and not cart.is_empty():
        st.code(build_upi_link(cart.total_price))

    if st.button("Place order", disabled=cart.is_empty()):
        try:
            order = checkout(
                db,
                ctx,
                [(line.item_id, line.quantity) for line in cart.lines],
                order_type,
                pickup_time,
                payment_choice,
                allocator=TokenAllocator(session_factory=SessionLocal),
                estimator=WaitTimeEstimator(),
            )
        except CanteenError as exc:
            st.error(str(exc))
        else:
            cart.clear()
            st.success(f"Order placed. Your token is #{order.token_number}")

    st.subheader("My orders")
    st.caption(f"Last refresh: {now_string()}")
    for order in list_user_orders(db, ctx.user_id):
        label, _ = status_badge(order.status)
        st.write(f"Token #{order.token_number} · {label} · {order.time_slot} · ₹{order.total_amount}")
        if order.estimated_wait_time and order.status not in {"ready", "completed"}:
            st.caption(order.estimated_wait_time)
