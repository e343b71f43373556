from datetime import datetime, time

import pandas as pd
import streamlit as st

# Configuration
from gashub.config import get_config
from gashub.formatters import format_brl, format_date, format_datetime

# Order backend + services + live views
from gashub.data.aggregator import revenue_by_day
from gashub.data.models import CREDIT, OrderDraft, ProductDraft
from gashub.data.services import get_order_service
from gashub.data.session import ConfigSession
from gashub.data.util import get_order_backend
from gashub.data.views import OrderDashboard, ReceivablesBoard

st.set_page_config(page_title="GasHub | Pedidos", layout="wide")

config = get_config()


@st.cache_resource
def _backend():
    # One store per server process, shared by every browser session
    return get_order_backend()


backend = _backend()
service = get_order_service(backend, ConfigSession())

# -----------------------------------------------------------------------------
# Sidebar filters
# -----------------------------------------------------------------------------
st.sidebar.header("Filtros")

DATE_LABELS = {"today": "Hoje", "this_week": "Esta semana", "this_month": "Este mês", "custom": "Personalizado"}
STATUS_LABELS = {"all": "Todos", "paid": "Pagos", "credit": "Fiados", "pending": "Pendentes"}
SORT_LABELS = {"date": "Data", "value": "Valor", "customer_name": "Cliente"}

date_range = st.sidebar.radio(
    "Período", list(DATE_LABELS), format_func=DATE_LABELS.get,
    index=list(DATE_LABELS).index(config.default_date_range),
)
start_ts = end_ts = None
if date_range == "custom":
    picked = st.sidebar.date_input("Intervalo", ())
    # A half-picked interval leaves the period unfiltered
    if len(picked) == 2:
        start_ts = datetime.combine(picked[0], time.min)
        end_ts = datetime.combine(picked[1], time.max)

status = st.sidebar.radio(
    "Status", list(STATUS_LABELS), format_func=STATUS_LABELS.get,
    index=list(STATUS_LABELS).index(config.default_status_filter),
)
customer_name = st.sidebar.text_input("Buscar cliente")
sort_by = st.sidebar.selectbox(
    "Ordenar por", list(SORT_LABELS), format_func=SORT_LABELS.get,
    index=list(SORT_LABELS).index(config.default_sort_by),
)
descending = st.sidebar.toggle("Mais recentes / maiores primeiro", value=config.default_sort_order == "desc")
row_limit = st.sidebar.number_input(
    "Máximo de linhas",
    min_value=config.min_row_limit,
    max_value=config.max_row_limit,
    value=config.default_row_limit,
    step=50,
)

tab_dashboard, tab_receivables, tab_new = st.tabs(["Painel", "Fiados", "Novo pedido"])

# -----------------------------------------------------------------------------
# Dashboard
# -----------------------------------------------------------------------------
with tab_dashboard, OrderDashboard(backend) as dashboard:
    summary = dashboard.update_filters(
        date_range=date_range,
        start_ts=start_ts,
        end_ts=end_ts,
        status=status,
        customer_name=customer_name or None,
        sort_by=sort_by,
        sort_order="desc" if descending else "asc",
    )
    metrics = summary.metrics

    if dashboard.error:
        st.error(dashboard.error)

    c1, c2, c3, c4, c5 = st.columns(5)
    c1.metric("Total pedidos", f"{metrics.total_orders:,}")
    c2.metric("Valor total", format_brl(metrics.total_value))
    c3.metric("Ticket médio", format_brl(metrics.average_order_value))
    c4.metric("Fiados", f"{metrics.credit_count:,}")
    c5.metric("Pagos", f"{metrics.paid_count:,} ({metrics.conversion_rate:.0f}%)")

    st.markdown("### Pedidos")
    if not summary.orders:
        st.info("Nenhum pedido encontrado para os filtros selecionados.")
    else:
        orders_df = pd.DataFrame([
            {
                "Data": format_datetime(o.timestamp),
                "Cliente": o.customer_name,
                "Endereço": o.address,
                "Produtos": ", ".join(f"{p.quantity}x {p.name}" for p in o.products),
                "Pagamento": o.payment_method,
                "Status": "Pago" if o.is_paid else "Pendente",
                "Valor": o.display_value,
            }
            for o in summary.orders[: int(row_limit)]
        ])
        st.dataframe(orders_df, use_container_width=True, hide_index=True)

        st.markdown("### Faturamento por dia")
        daily = revenue_by_day(summary.orders)
        st.bar_chart(daily, x="dia", y="valor", use_container_width=True)

# -----------------------------------------------------------------------------
# Receivables
# -----------------------------------------------------------------------------
with tab_receivables, ReceivablesBoard(backend, service) as board:
    st.metric("Total em fiado", format_brl(board.total))
    if board.error:
        st.error(board.error)

    query = st.text_input("Buscar cliente", key="receivables_query")
    receivables = board.search(query)
    if not receivables:
        st.info("Nenhum pedido fiado encontrado.")

    for order in receivables:
        with st.container(border=True):
            left, right = st.columns([4, 1])
            left.markdown(f"**{order.customer_name}**, {order.address}")
            left.write(f"💰 {format_brl(order.pending_value)} · 📅 Vencimento: {format_date(order.due_date)}")
            if right.button("Marcar como pago", key=f"pay_{order.id}"):
                result = board.mark_as_paid(order.id)
                if not result.success:
                    st.error(result.message)
                else:
                    st.rerun()

# -----------------------------------------------------------------------------
# New order
# -----------------------------------------------------------------------------
with tab_new:
    with st.form("new_order", clear_on_submit=True):
        name = st.text_input("Nome do cliente")
        address = st.text_input("Endereço")
        products_df = st.data_editor(
            pd.DataFrame([{"name": config.default_product_name, "quantity": 1, "price": 0.0}]),
            num_rows="dynamic",
            column_config={
                "name": st.column_config.TextColumn("Produto"),
                "quantity": st.column_config.NumberColumn("Qtd", min_value=1, step=1),
                "price": st.column_config.NumberColumn("Preço (R$)", min_value=0.0, format="%.2f"),
            },
            use_container_width=True,
        )
        method = st.selectbox("Forma de pagamento", ["Dinheiro", "Cartão", "Pix", CREDIT])
        due_date = st.date_input("Vencimento (fiado)")
        submitted = st.form_submit_button("Adicionar pedido")

    if submitted:
        draft = OrderDraft(
            customer_name=name,
            address=address,
            products=[
                ProductDraft(name=str(row["name"]), quantity=int(row["quantity"]), price=float(row["price"]))
                for row in products_df.fillna({"name": "", "quantity": 0, "price": 0.0}).to_dict(orient="records")
            ],
            payment_method=method,
            due_date=due_date if method == CREDIT else None,
        )
        result = service.create_order(draft)
        (st.success if result.success else st.error)(result.message)

# -----------------------------------------------------------------------------
# Footer
# -----------------------------------------------------------------------------
with st.expander("Fonte de dados"):
    st.write(
        f"Backend **{config.order_backend}**, coleção `{config.orders_collection}`"
        + (f" em `{config.data_dir}/`." if config.order_backend == "jsonl" else ".")
    )
