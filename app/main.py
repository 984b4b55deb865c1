"""
Streamlit Frontend for Carpool Ledger

The screens the group uses day to day: log trips, manage cars and people,
set rates, and see who owes what.

DESIGN PRINCIPLES:
1. Every form calls exactly one session mutator
2. Rejected input is shown as a message, the ledger stays unchanged
3. Balances are recomputed on every render, never cached
"""

import asyncio
from datetime import date

import streamlit as st

from carpool_ledger.config import get_settings, validate_all_settings
from carpool_ledger.ledger import ValidationError
from carpool_ledger.models import FuelType
from carpool_ledger.orchestrator import LedgerSession, open_session
from carpool_ledger.queries import format_currency, format_date


# Page configuration
st.set_page_config(
    page_title="Carpool Ledger",
    page_icon="🚗",
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
def get_session() -> LedgerSession:
    """Load the ledger once per server process."""
    return run_async(open_session())


def submit(action, *args, success: str = "", **kwargs):
    """Run a session mutator and report validation problems inline."""
    try:
        result = action(*args, **kwargs)
    except ValidationError as e:
        st.error(e.message)
        return None
    if success:
        st.success(success)
    return result


def main():
    """Main application entry point."""
    session = get_session()

    st.sidebar.title("🚗 Carpool Ledger")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["🛣️ Trips", "🚙 Cars", "👥 People & Rates", "💰 Balances", "✏️ Adjustments", "⚙️ Settings"],
        index=0,
    )

    if page == "🛣️ Trips":
        render_trips_page(session)
    elif page == "🚙 Cars":
        render_cars_page(session)
    elif page == "👥 People & Rates":
        render_people_page(session)
    elif page == "💰 Balances":
        render_balances_page(session)
    elif page == "✏️ Adjustments":
        render_adjustments_page(session)
    elif page == "⚙️ Settings":
        render_settings_page(session)


def render_trips_page(session: LedgerSession):
    """Trip form, calendar and trip list."""
    st.title("🛣️ Trips")
    state = session.state
    cars = {car.id: car.name for car in state.cars}
    people = {person.id: person.name for person in state.people}

    if not cars or not people:
        st.info("Add at least one car and one person before logging trips.")
    else:
        with st.form("trip-form", clear_on_submit=True):
            trip_date = st.date_input("Date", value=date.today())
            car_id = st.selectbox("Car", options=list(cars), format_func=cars.get)
            driver_id = st.selectbox("Driver", options=list(people), format_func=people.get)
            passenger_ids = st.multiselect(
                "Passengers",
                options=list(people),
                format_func=people.get,
            )
            if st.form_submit_button("Add trip", type="primary"):
                submit(
                    session.add_trip, trip_date, car_id, driver_id, passenger_ids,
                    success="Trip added",
                )

    render_calendar(session)

    st.markdown("---")
    filter_car = st.selectbox(
        "Filter by car",
        options=[None] + list(cars),
        format_func=lambda car_id: "All cars" if car_id is None else cars[car_id],
    )
    trips = session.describe_trips(filter_car)
    if not trips:
        st.info("No trips yet for this filter.")
    for trip in trips:
        col1, col2 = st.columns([5, 1])
        with col1:
            passengers = ", ".join(trip.passenger_names) or "None"
            st.markdown(
                f"**{format_date(trip.date)}** · {trip.car_name}  \n"
                f"Driver: {trip.driver_name} · Passengers: {passengers}"
            )
        with col2:
            if st.button("Remove", key=f"trip-{trip.trip_id}"):
                session.delete_trip(trip.trip_id)
                st.rerun()


def render_calendar(session: LedgerSession):
    """Month grid with a marker on days that have trips."""
    if "calendar_month" not in st.session_state:
        today = date.today()
        st.session_state.calendar_month = (today.year, today.month)
    year, month = st.session_state.calendar_month

    col_prev, col_label, col_next = st.columns([1, 4, 1])
    with col_prev:
        if st.button("◀", key="calendar-prev"):
            st.session_state.calendar_month = (year - 1, 12) if month == 1 else (year, month - 1)
            st.rerun()
    with col_label:
        st.markdown(f"### {date(year, month, 1).strftime('%B %Y')}")
    with col_next:
        if st.button("▶", key="calendar-next"):
            st.session_state.calendar_month = (year + 1, 1) if month == 12 else (year, month + 1)
            st.rerun()

    days = session.calendar_month(year, month)
    header = st.columns(7)
    for col, name in zip(header, ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]):
        col.markdown(f"**{name}**")
    for week in range(6):
        cols = st.columns(7)
        for col, day in zip(cols, days[week * 7:(week + 1) * 7]):
            label = str(day.day)
            if day.is_today:
                label = f"**{label}**"
            if day.other_month:
                label = f"_{label}_"
            if day.has_trip:
                label += " 🔵"
            col.markdown(label)


def render_cars_page(session: LedgerSession):
    """Car form and car list."""
    st.title("🚙 Cars")

    with st.form("car-form", clear_on_submit=True):
        name = st.text_input("Car name")
        fuel = st.selectbox(
            "Fuel",
            options=list(FuelType),
            format_func=lambda f: f.value.upper() if f == FuelType.CNG else f.value.title(),
        )
        if st.form_submit_button("Add car", type="primary"):
            submit(session.add_car, name, fuel, success="Car added")

    if not session.state.cars:
        st.info("No cars yet. Add your first car above.")
    for car in list(session.state.cars):
        col1, col2 = st.columns([5, 1])
        col1.markdown(f"**{car.name}** · Fuel: {car.fuel_type.value}")
        if col2.button("Remove", key=f"car-{car.id}"):
            session.delete_car(car.id)
            st.rerun()


def render_people_page(session: LedgerSession):
    """Person form and the person x car rate table."""
    st.title("👥 People & Rates")

    with st.form("person-form", clear_on_submit=True):
        name = st.text_input("Name")
        if st.form_submit_button("Add person", type="primary"):
            submit(session.add_person, name, success="Person added")

    state = session.state
    if not state.cars or not state.people:
        st.info("Add at least one car and one person to start setting rates.")
        return

    st.markdown("### Rate per ride")
    header = st.columns(len(state.cars) + 1)
    header[0].markdown("**Person**")
    for col, car in zip(header[1:], state.cars):
        col.markdown(f"**{car.name}**")

    for person in state.people:
        cols = st.columns(len(state.cars) + 1)
        cols[0].markdown(person.name)
        for col, car in zip(cols[1:], state.cars):
            current = float(person.rates.get(car.id, 0) or 0)
            value = col.number_input(
                f"{person.name} / {car.name}",
                min_value=0.0,
                step=1.0,
                value=max(current, 0.0),
                key=f"rate-{person.id}-{car.id}",
                label_visibility="collapsed",
            )
            if value != current:
                submit(session.set_rate, person.id, car.id, value)


def render_balances_page(session: LedgerSession):
    """Who owes what, per car."""
    st.title("💰 Balances")
    people = {person.id: person.name for person in session.state.people}

    person_id = st.selectbox(
        "Filter by person",
        options=[None] + list(people),
        format_func=lambda pid: "Everyone" if pid is None else people[pid],
    )
    currency = session.queries.currency

    entries = session.list_balances(person_id)
    if not entries:
        st.info("No dues to show yet. Add trips or manual adjustments to see amounts here.")
        return

    for entry in entries:
        col1, col2 = st.columns([4, 1])
        status = "Owes" if entry.owes else "Is owed"
        col1.markdown(
            f"**{entry.person_name}** · {entry.car_name}  \n"
            f"{status} {format_currency(abs(entry.amount), currency)}"
        )
        col2.metric(
            "Due" if entry.owes else "Credit",
            format_currency(abs(entry.amount), currency),
        )


def render_adjustments_page(session: LedgerSession):
    """Manual credit/debit form and the recent adjustments."""
    st.title("✏️ Manual Adjustments")
    state = session.state
    cars = {car.id: car.name for car in state.cars}
    people = {person.id: person.name for person in state.people}

    if cars and people:
        with st.form("adjustment-form", clear_on_submit=True):
            car_id = st.selectbox("Car", options=list(cars), format_func=cars.get)
            person_id = st.selectbox("Person", options=list(people), format_func=people.get)
            amount = st.number_input(
                "Amount",
                value=0.0,
                step=1.0,
                help="Positive adds to what they owe, negative gives them credit",
            )
            note = st.text_input("Note (optional)")
            if st.form_submit_button("Record adjustment", type="primary"):
                submit(
                    session.add_adjustment, car_id, person_id, amount, note,
                    success="Adjustment recorded",
                )
    else:
        st.info("Add at least one car and one person before recording adjustments.")

    currency = session.queries.currency
    adjustments = session.describe_adjustments()
    if not adjustments:
        st.info("No manual adjustments yet.")
    for adj in adjustments:
        col1, col2, col3 = st.columns([4, 1, 1])
        when = adj.created_at.strftime("%d %b %Y %H:%M") if adj.created_at else ""
        car = f" · {adj.car_name}" if adj.car_name else ""
        note = f" · {adj.note}" if adj.note else ""
        col1.markdown(f"**{adj.person_name}**{car}  \n{when}{note}")
        col2.markdown(
            f"{'Added Due' if adj.direction == 'due' else 'Added Credit'}  \n"
            f"**{format_currency(abs(adj.amount), currency)}**"
        )
        if col3.button("Remove", key=f"adj-{adj.adjustment_id}"):
            session.delete_adjustment(adj.adjustment_id)
            st.rerun()


def render_settings_page(session: LedgerSession):
    """Configuration status and the reset button."""
    st.title("⚙️ Settings")

    status = validate_all_settings()
    for name in ("storage", "ledger", "app"):
        if status.get(name, False):
            st.success(f"✅ {name.title()} settings loaded")
        else:
            st.error(f"❌ {name.title()} - {status.get(f'{name}_error', 'Not configured')}")

    st.markdown(f"**Ledger file:** `{get_settings().storage.data_path}`")

    st.markdown("---")
    st.markdown("### Reset data")
    confirm = st.checkbox(
        "I understand this removes all cars, people, rates, trips and adjustments"
    )
    if st.button("🗑️ Reset all data", disabled=not confirm):
        session.reset()
        st.success("All data removed")


if __name__ == "__main__":
    main()
