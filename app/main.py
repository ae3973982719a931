"""
Streamlit Frontend for Finance Buddy

A thin dispatcher over LedgerService: every button calls exactly one
service operation and shows the outcome it returns.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Every action reports success or a plain-language failure
3. No ledger logic lives here
"""

from decimal import Decimal

import streamlit as st

from finance_buddy.audit import configure_logging
from finance_buddy.config import get_settings, validate_all_settings
from finance_buddy.models.ledger import OperationResult
from finance_buddy.orchestrator import LedgerService, create_app_components


st.set_page_config(
    page_title="Finance Buddy",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)


@st.cache_resource
def get_service() -> LedgerService:
    """Create the ledger service once and restore the snapshot (cached)."""
    settings = get_settings()
    configure_logging(settings.app.effective_log_level)

    service = create_app_components()
    if settings.ledger.load_on_startup:
        result = service.load()
        st.session_state.startup_message = result.message
    return service


def show_result(result: OperationResult) -> None:
    """Render an operation outcome."""
    if result.success:
        st.success(result.message)
    else:
        st.error(result.message)


def to_decimal(value: float) -> Decimal:
    # number_input returns floats; keep the two decimals the user typed
    return Decimal(f"{value:.2f}")


def main():
    """Main application entry point."""
    service = get_service()
    currency = get_settings().app.currency_symbol

    st.sidebar.title("💰 Finance Buddy")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        [
            "🏦 Accounts",
            "💸 Move Money",
            "📜 Transactions",
            "↩️ Undo",
            "💾 Save / Load",
            "📋 Activity",
        ],
        index=0,
    )

    if st.session_state.get("startup_message"):
        st.sidebar.caption(st.session_state.startup_message)

    if page == "🏦 Accounts":
        render_accounts_page(service, currency)
    elif page == "💸 Move Money":
        render_money_page(service)
    elif page == "📜 Transactions":
        render_transactions_page(service, currency)
    elif page == "↩️ Undo":
        render_undo_page(service)
    elif page == "💾 Save / Load":
        render_persistence_page(service)
    elif page == "📋 Activity":
        render_activity_page(service)


def render_accounts_page(service: LedgerService, currency: str):
    """Create and list accounts."""
    st.title("🏦 Accounts")

    with st.form("create_account", clear_on_submit=True):
        st.subheader("Create account")
        name = st.text_input("Account holder name")
        opening = st.number_input(
            "Opening balance",
            min_value=0.0,
            step=0.01,
            format="%.2f",
        )
        if st.form_submit_button("➕ Create", type="primary"):
            show_result(service.create_account(name, to_decimal(opening)))

    st.markdown("---")
    st.subheader("Accounts")
    result = service.list_accounts()
    if not result.accounts:
        st.info(result.message)
        return
    st.table([
        {
            "ID": account.id,
            "Name": account.name,
            "Balance": f"{currency}{account.balance:,.2f}",
            "Transactions": account.transaction_count,
        }
        for account in result.accounts
    ])


def render_money_page(service: LedgerService):
    """Deposit, withdraw and transfer."""
    st.title("💸 Move Money")

    col1, col2, col3 = st.columns(3)

    with col1:
        with st.form("deposit", clear_on_submit=True):
            st.subheader("Deposit")
            account_id = st.number_input("Account ID", min_value=1, step=1, key="dep_id")
            amount = st.number_input("Amount", min_value=0.0, step=0.01, format="%.2f", key="dep_amt")
            if st.form_submit_button("Deposit"):
                show_result(service.deposit(int(account_id), to_decimal(amount)))

    with col2:
        with st.form("withdraw", clear_on_submit=True):
            st.subheader("Withdraw")
            account_id = st.number_input("Account ID", min_value=1, step=1, key="wd_id")
            amount = st.number_input("Amount", min_value=0.0, step=0.01, format="%.2f", key="wd_amt")
            if st.form_submit_button("Withdraw"):
                show_result(service.withdraw(int(account_id), to_decimal(amount)))

    with col3:
        with st.form("transfer", clear_on_submit=True):
            st.subheader("Transfer")
            from_id = st.number_input("From account ID", min_value=1, step=1)
            to_id = st.number_input("To account ID", min_value=1, step=1)
            amount = st.number_input("Amount", min_value=0.0, step=0.01, format="%.2f", key="tr_amt")
            if st.form_submit_button("Transfer"):
                show_result(service.transfer(int(from_id), int(to_id), to_decimal(amount)))


def render_transactions_page(service: LedgerService, currency: str):
    """Show one account's history, newest first."""
    st.title("📜 Transactions")

    account_id = st.number_input("Account ID", min_value=1, step=1)
    result = service.show_transactions(int(account_id))
    if not result.success:
        st.warning(result.message)
        return

    st.markdown(f"**{result.message}**")
    for transaction in result.transactions:
        st.text(transaction.describe(currency))


def render_undo_page(service: LedgerService):
    """Undo the most recent operation."""
    st.title("↩️ Undo")
    st.markdown(
        "Undo reverses only the most recent operation. "
        "An undo that cannot be applied is discarded and cannot be retried."
    )

    pending = service.store.journal.peek()
    if pending:
        st.caption(
            f"Next to undo: {pending.operation.value} of {pending.amount:.2f} "
            f"on account {pending.account_id}"
        )

    if st.button("↩️ Undo last operation", type="primary"):
        show_result(service.undo_last())


def render_persistence_page(service: LedgerService):
    """Save, load and end the session."""
    st.title("💾 Save / Load")
    settings = get_settings().ledger
    st.markdown(f"Data file: `{settings.data_file}`")

    col1, col2, col3 = st.columns(3)
    with col1:
        if st.button("💾 Save data", type="primary"):
            show_result(service.save())
    with col2:
        if st.button("📂 Load data"):
            show_result(service.load())
    with col3:
        if st.button("🚪 Exit"):
            result = service.shutdown(save=settings.save_on_exit)
            show_result(result)
            if result.success:
                get_service.clear()

    st.markdown("---")
    st.markdown("### Configuration")
    status = validate_all_settings()
    for name in ("ledger", "app"):
        if status.get(name, False):
            st.success(f"✅ {name} settings OK")
        else:
            st.error(f"❌ {name} settings: {status.get(f'{name}_error', 'invalid')}")


def render_activity_page(service: LedgerService):
    """Recent audit events."""
    st.title("📋 Activity")

    storage = service.audit_logger.storage
    if storage is None:
        st.info("Activity is only written to the log.")
        return

    events = storage.get_recent_events(limit=50)
    if not events:
        st.info("No activity yet.")
        return

    st.table([
        {
            "Time": event.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
            "Event": event.event_type.value.replace("_", " "),
            "Account": event.entity_id if event.entity_id is not None else "",
            "Details": event.description,
        }
        for event in events
    ])


if __name__ == "__main__":
    main()
