# app.py

import datetime

from dotenv import load_dotenv

load_dotenv()  # ← Must precede any import depending on .env

import streamlit as st

from core.config import Settings
from core.log import setup_logging
from core.models import (
    BUDGET_DEFAULT,
    BUDGET_MAX,
    BUDGET_MIN,
    BUDGET_STEP,
    Speaker,
    TRAVEL_STYLES,
    TripQuery,
)
from core.state import Store
from services import budget as bsvc
from services.planner import build_pipelines
from services.preferences import DARK, ThemePreference

# ──────────────────────────────────────────────────────────────────────────────
# 0. Streamlit configuration
# ──────────────────────────────────────────────────────────────────────────────
st.set_page_config(page_title="AI Trip Planner", layout="wide")

try:
    settings = Settings.from_env()
except RuntimeError as e:
    st.error(f"🛑 {e}")
    st.stop()

setup_logging(settings.log_level)

# ──────────────────────────────────────────────────────────────────────────────
# 1. session_state initialisation (default values)
# ──────────────────────────────────────────────────────────────────────────────
if "store" not in st.session_state:
    st.session_state.store = Store()
    st.session_state.pipelines = build_pipelines(settings, st.session_state.store)
    st.session_state.budget_used = BUDGET_DEFAULT   # budget the shown itinerary was planned for

store: Store = st.session_state.store
itinerary_pipeline, chat_pipeline = st.session_state.pipelines
prefs = ThemePreference(settings.preferences_file)

# ──────────────────────────────────────────────────────────────────────────────
# 2. Sidebar: theme toggle (the only persisted setting)
# ──────────────────────────────────────────────────────────────────────────────
st.sidebar.markdown("## ⚙️ Display")
dark = st.sidebar.toggle("Dark mode", value=prefs.load() == DARK)
if dark != (prefs.load() == DARK):
    prefs.toggle()
if dark:
    st.markdown(
        "<style>.stApp { background-color: #0f172a; color: #e5e7eb; }</style>",
        unsafe_allow_html=True,
    )

# ──────────────────────────────────────────────────────────────────────────────
# 3. Planning form
# ──────────────────────────────────────────────────────────────────────────────
st.markdown("## 🧳 Plan your next trip")
with st.form("trip_form"):
    col1, col2 = st.columns(2)
    origin_input = col1.text_input("From", placeholder="e.g., Mumbai, Delhi, Bangalore")
    dest_input   = col2.text_input("Destination", placeholder="e.g., Jaipur, Goa, Kerala")
    start_input  = col1.date_input("Start date", datetime.date.today())
    end_input    = col2.date_input("End date", datetime.date.today() + datetime.timedelta(days=4))
    budget_input = st.slider(
        "Budget (INR)",
        min_value=BUDGET_MIN,
        max_value=BUDGET_MAX,
        value=BUDGET_DEFAULT,
        step=BUDGET_STEP,
    )
    styles_input = st.multiselect("Travel style", TRAVEL_STYLES)
    submitted = st.form_submit_button("Start Planning", disabled=store.state.planning)

if submitted:
    if end_input < start_input:
        st.error("🛑 End date must be after start date.")
    else:
        query = TripQuery(
            origin=origin_input,
            destination=dest_input,
            start=start_input,
            end=end_input,
            budget=budget_input,
            styles=frozenset(styles_input),
        )
        with st.spinner("Planning..."):
            itinerary_pipeline.submit(query)
        st.session_state.budget_used = budget_input

# ──────────────────────────────────────────────────────────────────────────────
# 4. Itinerary + budget summary
# ──────────────────────────────────────────────────────────────────────────────
itin = store.state.itinerary
if itin is not None:
    st.subheader(f"{itin.destination} Itinerary")

    summary = bsvc.summarize(itin, st.session_state.budget_used)
    st.markdown("#### Budget Summary")
    chart_col, text_col = st.columns([2, 1])
    chart_col.bar_chart(bsvc.chart_frame(itin), x="name", y="cost")
    text_col.markdown(f"**Total Itinerary Cost:** ₹{summary.total:,.0f}")
    text_col.markdown(f"Budget: ₹{summary.budget:,.0f}")
    (text_col.error if summary.over else text_col.success)(f"Status: {summary.status}")

    for d in itin.days:
        with st.expander(f"Day {d.day}: {d.title}", expanded=True):
            for activity in d.activities:
                st.markdown(f"- {activity}")
            st.caption(f"Estimated Cost: ₹{d.cost:,.0f}")

# ──────────────────────────────────────────────────────────────────────────────
# 5. Chat assistant
# ──────────────────────────────────────────────────────────────────────────────
st.markdown("---")
st.subheader("✨ AI Trip Assistant")
for msg in store.state.transcript:
    with st.chat_message("user" if msg.speaker is Speaker.USER else "assistant"):
        st.markdown(msg.text)

question = st.chat_input("Ask me anything about your trip...")
if question and question.strip():
    with st.chat_message("user"):
        st.markdown(question)
    with st.chat_message("assistant"):
        with st.spinner("Typing..."):
            outcome = chat_pipeline.send(question)
        st.markdown(outcome.value)
