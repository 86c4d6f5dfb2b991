"""
Streamlit UI for cart pricing.

Features:
- Cart builder with editable quantities
- Pricing date picker showing the sales active that day
- Per-line pricing breakdown and trace
- Catalog and sale schedule browser
"""
import streamlit as st
import pandas as pd
from datetime import date

from cart_pricing.engine import PricingEngine, Request
from cart_pricing.engine.models import describe_effect
from cart_pricing.engine.sale_schedule import find_active_entries
from cart_pricing.engine.errors import PricingError


st.set_page_config(
    page_title="Cart Pricing",
    layout="wide",
    initial_sidebar_state="expanded"
)


@st.cache_resource
def get_engine():
    """Get cached engine instance."""
    return PricingEngine()


try:
    engine = get_engine()
except (PricingError, FileNotFoundError) as e:
    st.error(f"System Error: {e}")
    st.stop()


# ============================================================================
# SIDEBAR: Pricing date
# ============================================================================
with st.sidebar:
    st.header("📅 Pricing Date")
    reference_date = st.date_input("Price cart on", value=date.today())

    active = find_active_entries(engine.schedule, reference_date, engine.catalog)
    if active:
        st.success(f"🏷️ **{len(active)} Sales Active**")
        for item_id, entry in active.items():
            st.caption(f"**{engine.catalog[item_id].name}**: {describe_effect(entry.sale.effect)}")
    else:
        st.info("No sales today")


st.title("Cart Pricing")
st.caption(f"{len(engine.catalog)} items | {len(engine.schedule)} scheduled sales")

tab1, tab2 = st.tabs(["🛒 Cart Builder", "📚 Catalog & Sales"])


# ============================================================================
# TAB 1: CART BUILDER
# ============================================================================
with tab1:
    if 'cart' not in st.session_state:
        st.session_state.cart = []

    col1, col2 = st.columns([1.8, 1.2], gap="large")

    with col1:
        st.subheader("Add Items")
        with st.container(border=True):
            labels = {f"{item.item_id} | {item.name}": item.item_id for item in engine.catalog.values()}
            selected = st.selectbox("Item", options=list(labels), label_visibility="collapsed")

            c1, c2 = st.columns([1, 4])
            with c1:
                quantity = st.number_input("Qty", min_value=1, value=1, step=1)
            with c2:
                st.write("")
                st.write("")
                if st.button("➕ Add to Cart", type="primary"):
                    st.session_state.cart.append((labels[selected], int(quantity)))
                    st.rerun()

    with col2:
        st.subheader("Cart Summary")
        with st.container(border=True):
            if st.session_state.cart:
                result = engine.calculate(Request(items=st.session_state.cart, reference_date=reference_date))

                m1, m2 = st.columns(2)
                m1.metric("Total", f"${result.total:,.2f}")
                m2.metric("Units", sum(count for _, count in st.session_state.cart))

                full_price = sum(line.count * line.unit_price for line in result.lines)
                if full_price > result.total:
                    st.markdown(f":green[**You Save: ${full_price - result.total:,.2f}**]")

                if st.button("🗑️ Clear", use_container_width=True):
                    st.session_state.cart = []
                    st.rerun()
            else:
                st.info("🛒 Cart is empty")

    if st.session_state.cart:
        st.markdown("### 📝 Edit Parcels")
        edited_df = st.data_editor(
            pd.DataFrame([
                {'Item ID': item_id, 'Name': engine.catalog[item_id].name, 'Count': count}
                for item_id, count in st.session_state.cart
            ]),
            use_container_width=True,
            column_config={
                "Item ID": st.column_config.NumberColumn("Item ID", disabled=True),
                "Name": st.column_config.TextColumn("Name", disabled=True),
                "Count": st.column_config.NumberColumn("Count", min_value=0, step=1),
            },
            hide_index=True,
            key="cart_editor"
        )

        if st.button("💾 Update Quantities"):
            st.session_state.cart = [
                (int(row['Item ID']), int(row['Count']))
                for _, row in edited_df.iterrows() if row['Count'] > 0
            ]
            st.rerun()

        with st.expander("📊 View Detailed Pricing Breakdown"):
            st.dataframe(pd.DataFrame([{
                'Item': line.name,
                'Count': line.count,
                'Counted As': line.effective_count,
                'Unit Price': f"${line.unit_price:.2f}",
                'Sale': line.sale or "",
                'Subtotal': f"${line.subtotal:.2f}",
            } for line in result.lines]), use_container_width=True, hide_index=True)

            for line in result.lines:
                st.code(line.get_trace_text(), language=None)


# ============================================================================
# TAB 2: CATALOG & SALES
# ============================================================================
with tab2:
    st.subheader("📚 Catalog")
    st.dataframe(pd.DataFrame([{
        'Item ID': item.item_id,
        'Name': item.name,
        'Unit Price': item.unit_price,
        'Bulk': f"{item.bulk_pricing.amount} for ${item.bulk_pricing.group_price:.2f}" if item.bulk_pricing else "",
    } for item in engine.catalog.values()]), use_container_width=True, hide_index=True)

    st.subheader("🏷️ Sale Schedule")
    if engine.schedule:
        st.dataframe(pd.DataFrame([{
            'ID': entry.sale_id,
            'Name': entry.sale.name,
            'Item': engine.catalog[entry.target_item_id].name,
            'Effect': describe_effect(entry.sale.effect),
            'When': str(entry.applies_on),
        } for entry in engine.schedule]), use_container_width=True, hide_index=True)
    else:
        st.info("No scheduled sales.")
