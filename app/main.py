"""
Streamlit Console for dompetbot

A local stand-in for the chat channel. Messages typed here go through the
same orchestrator the Telegram bot uses, so commands, replies and ledger
writes behave identically:

- Chat: send commands and free-form questions, read the bot's replies
- Pockets: current balance of every pocket, straight from the ledger
- Settings: which collaborators are configured

Without Google Sheets credentials the console runs on an in-memory ledger
that lives as long as the Streamlit process.
"""

import asyncio

import streamlit as st

from dompetbot.config import get_settings, validate_all_settings
from dompetbot.ledger import pocket_summaries
from dompetbot.models import DEFAULT_SENDER, InboundMessage
from dompetbot.orchestrator import TransactionOrchestrator, create_app_components
from dompetbot.reports import format_money
from dompetbot.services.storage import InMemoryTransactionStore, TransactionStore


# Page configuration
st.set_page_config(
    page_title="Dompet Bot",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    try:
        return create_app_components(use_storage=True)
    except Exception as e:
        st.error(f"Failed to initialize: {e}")
        return create_app_components(use_storage=False, use_llm=False)


def main():
    """Main application entry point."""
    orchestrator, store = get_components()

    # Sidebar navigation
    st.sidebar.title("💰 Dompet Bot")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["💬 Chat", "👛 Pockets", "⚙️ Settings"],
        index=0,
    )

    st.sidebar.markdown("---")
    sender = st.sidebar.text_input("Sender", value=DEFAULT_SENDER)
    if isinstance(store, InMemoryTransactionStore):
        st.sidebar.warning("Ledger in memory. Nothing is saved to Google Sheets.")

    st.sidebar.markdown(
        """
        **Try:**
        - `/pemasukan 500rb gaji ke pocket utama`
        - `/pengeluaran 25rb makan siang dari pocket utama`
        - `saldo pocket utama`
        - `transfer 100rb dari pocket utama ke pocket tabungan`
        - `pengeluaran bulan ini`
        """
    )

    if page == "💬 Chat":
        render_chat_page(orchestrator, sender or DEFAULT_SENDER)
    elif page == "👛 Pockets":
        render_pockets_page(store)
    elif page == "⚙️ Settings":
        render_settings_page()


def render_chat_page(orchestrator: TransactionOrchestrator, sender: str):
    """Render the chat page."""
    st.title("💬 Chat")

    if "history" not in st.session_state:
        st.session_state.history = []

    for role, text in st.session_state.history:
        with st.chat_message(role):
            st.text(text)

    prompt = st.chat_input("Ketik pesan, misalnya /help")
    if not prompt:
        return

    st.session_state.history.append(("user", prompt))
    with st.chat_message("user"):
        st.text(prompt)

    with st.spinner("Memproses..."):
        reply = run_async(orchestrator.handle(InboundMessage(text=prompt, sender=sender)))

    if reply is None:
        st.caption("(Pesan diabaikan, tidak ada balasan)")
        return

    st.session_state.history.append(("assistant", reply))
    with st.chat_message("assistant"):
        st.text(reply)


def render_pockets_page(store: TransactionStore):
    """Render the pocket balances page."""
    st.title("👛 Pockets")

    try:
        ledger = run_async(store.load_transactions(get_settings().app.max_ledger_rows))
    except Exception as e:
        st.error(f"Error: {str(e)}")
        return

    summaries = pocket_summaries(ledger)
    if not summaries:
        st.info("Belum ada transaksi. Catat pemasukan pertama lewat halaman Chat.")
        return

    total = sum((s.balance for s in summaries), start=0)
    st.metric("Total Saldo", format_money(total))

    st.dataframe(
        [
            {
                "Pocket": s.name,
                "Saldo": format_money(s.balance),
                "Terakhir oleh": s.last_sender or "-",
            }
            for s in summaries
        ],
        use_container_width=True,
    )

    with st.expander(f"📋 Semua transaksi ({len(ledger)})"):
        st.dataframe([tx.to_row() for tx in ledger], use_container_width=True)


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Connection Status")

    status = validate_all_settings()

    services = [
        ("Google Sheets (Ledger)", "google_sheets"),
        ("Gemini (Categories & Queries)", "gemini"),
        ("Telegram (Bot)", "telegram"),
        ("Application", "app"),
    ]

    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        "To configure the application, create a `.env` file with your keys. "
        "See `.env.example` for the required variables."
    )


if __name__ == "__main__":
    main()
