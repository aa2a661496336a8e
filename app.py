import os
import logging
from datetime import datetime, date

import streamlit as st

from config import APP, VALIDATION
from vitals import VitalsValidationError, FIELDS
from assessment import severity
from planner import CONDITION_LABELS, meal_text
from dashboard import vitals_frame, vitals_summary, plot_vitals_trend
from llm import suggest_meal_swaps
from chat import ChatHub
from storage import PortalStore
import portal

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

st.set_page_config(page_title=APP["title"], layout="wide")

# Load Streamlit Secrets → environment variables (for Groq + database)
for key, default in [
    ("GROQ_API_KEY", ""),
    ("GROQ_BASE_URL", "https://api.groq.com/openai/v1"),
    ("GROQ_MODEL", "llama-3.3-70b-versatile"),
    ("DATABASE_URL", ""),
]:
    try:
        value = st.secrets.get(key, os.getenv(key, default))
    except FileNotFoundError:
        value = os.getenv(key, default)
    os.environ[key] = str(value)


@st.cache_resource
def _store() -> PortalStore:
    store = PortalStore()
    store.init_db()
    return store


@st.cache_resource
def _hub() -> ChatHub:
    return ChatHub()


store = _store()
hub = _hub()

# -------------------------
# Header + Disclaimer
# -------------------------
st.title(APP["title"])
st.info(APP["disclaimer"])

# ---------- QUICK ACCESS ----------
# Identity only; real authentication is handled outside this app.
if "user_id" not in st.session_state:
    st.subheader("Quick Access")

    email = st.text_input("Email")
    name = st.text_input("Full Name (new accounts)")
    role = st.radio("I am a", ["patient", "doctor"], horizontal=True)
    specialization = st.text_input("Specialization (doctors)") if role == "doctor" else None

    if st.button("Continue"):
        if "@" not in email:
            st.error("Enter a valid email.")
            st.stop()

        user = store.get_user_by_email(email)
        if not user:
            if not name.strip():
                st.error("Enter your full name to create an account.")
                st.stop()
            user = store.create_user(email, name, role, specialization=specialization)

        st.session_state["user_id"] = user["id"]
        st.session_state["role"] = user["role"]
        st.session_state["display_name"] = user["name"]
        st.rerun()

    st.stop()

user_id = st.session_state["user_id"]
role = st.session_state["role"]

st.sidebar.success(f"Logged in: {st.session_state.get('display_name', 'User')} ({role})")
if st.sidebar.button("Logout"):
    for k in ["user_id", "role", "display_name", "last_vitals", "diet_plan"]:
        st.session_state.pop(k, None)
    st.rerun()


# -------------------------
# Helpers
# -------------------------
def _show_assessment(a: dict) -> None:
    level = severity(a)
    if level == "urgent":
        st.error("URGENT: One or more readings need immediate medical care.")
    elif level == "attention":
        st.warning("ATTENTION: Some readings are outside the normal range.")
    else:
        st.success("All readings are within the normal range.")

    if a["concerns"]:
        st.write("Concerns:")
        for c in a["concerns"]:
            st.write("•", c)
    if a["recommendations"]:
        st.write("Recommendations:")
        for r in a["recommendations"]:
            st.write("•", r)


def _show_plan(plan: dict) -> None:
    for meal in plan["meals"]:
        with st.expander(meal["name"], expanded=True):
            for item in meal["items"]:
                st.write(f"**{item['name']}** — {item['portion']}")
    st.write("### Exercises")
    for ex in plan["exercises"]:
        st.write(f"• {ex['name']}: {ex['duration']}, {ex['frequency']}")
    if plan["recommendations"]:
        st.write("### Recommendations")
        for rec in plan["recommendations"]:
            st.write("•", rec)


def _chat_panel(other: dict) -> None:
    for m in portal.conversation(store, user_id, other["id"]):
        who = "You" if m["sender_id"] == user_id else other["name"]
        st.write(f"**{who}** ({m['created_at']:%H:%M}): {m['content']}")

    text = st.text_input("Message", key=f"msg_{other['id']}")
    if st.button("Send", key=f"send_{other['id']}"):
        try:
            portal.send_message(store, hub, user_id, other["id"], text)
            st.rerun()
        except (portal.PortalError, ValueError) as e:
            st.error(str(e))


# =========================
# Patient views
# =========================
if role == "patient":
    tabs = st.tabs(["1) Record Vitals", "2) History", "3) Diet Plan", "4) Pregnancy", "5) Health Records", "6) Doctors & Chat"])

    # -------------------------
    # 1) Record Vitals
    # -------------------------
    with tabs[0]:
        st.subheader("Record vitals")

        col1, col2, col3 = st.columns(3)
        with col1:
            systolic = st.number_input("Systolic BP (mmHg)", min_value=0, max_value=300, value=120)
            diastolic = st.number_input("Diastolic BP (mmHg)", min_value=0, max_value=200, value=80)
        with col2:
            heart_rate = st.number_input("Heart rate (bpm)", min_value=0, max_value=300, value=72)
            temperature = st.number_input("Temperature (°C)", min_value=30.0, max_value=45.0, value=36.8, step=0.1)
        with col3:
            oxygen_level = st.number_input("Oxygen level (%)", min_value=0, max_value=100, value=98)
            glucose_level = st.number_input("Glucose (mg/dL)", min_value=0, max_value=600, value=100)

        st.caption(
            "Accepted ranges: " + " • ".join(
                f"{FIELDS[f][1]} {lo}–{hi}" for f, (lo, hi) in VALIDATION.items()
            )
        )

        if st.button("Save & assess"):
            payload = {
                "bloodPressure": {"systolic": systolic, "diastolic": diastolic},
                "heartRate": heart_rate,
                "temperature": temperature,
                "oxygenLevel": oxygen_level,
                "glucoseLevel": glucose_level,
            }
            try:
                st.session_state["last_vitals"] = portal.submit_vitals(store, user_id, payload)
            except VitalsValidationError as e:
                st.error("Vitals were not saved:")
                for msg in e.errors:
                    st.write("•", msg)

        record = st.session_state.get("last_vitals")
        if record:
            _show_assessment(record["assessment"])

            doctors = portal.connected_users(store, user_id)
            if doctors:
                choice = st.selectbox("Share with", doctors, format_func=lambda d: d["name"])
                if st.button("Share via chat"):
                    try:
                        portal.share_vitals(store, hub, user_id, record["id"], choice["id"], "chat")
                        st.success("Shared ✅")
                    except portal.PortalError as e:
                        st.error(str(e))

    # -------------------------
    # 2) History
    # -------------------------
    with tabs[1]:
        st.subheader("Vitals history")

        history = portal.vitals_history(store, user_id, user_id, limit=None)
        if not history:
            st.info("No vitals recorded yet.")
        else:
            df = vitals_frame(history)
            st.dataframe(df, use_container_width=True)

            summary = vitals_summary(df)
            st.write(
                f"**Readings:** {summary['count']} • **Urgent:** {summary['urgent']} • "
                f"**Needing attention:** {summary['attention']}"
            )

            st.write("### Trend")
            picked = st.multiselect(
                "Show",
                ["systolic", "diastolic", "heart_rate", "temperature", "oxygen_level", "glucose_level"],
                default=["systolic", "diastolic"],
            )
            if picked:
                st.pyplot(plot_vitals_trend(df, picked))

    # -------------------------
    # 3) Diet Plan
    # -------------------------
    with tabs[2]:
        st.subheader("Personalized diet & exercise plan")

        diet_type = st.selectbox("Diet type", ["veg", "non-veg"], format_func=lambda d: "Vegetarian" if d == "veg" else "Non-Vegetarian")
        picked = [
            tag for tag, label in CONDITION_LABELS.items()
            if st.checkbox(label, key=f"cond_{tag}")
        ]

        if st.button("Generate / Regenerate plan"):
            st.session_state["diet_plan"] = portal.create_diet_plan(store, user_id, diet_type, picked)

        plan = st.session_state.get("diet_plan") or store.get_diet_plan(user_id)
        if not plan:
            st.info("Click 'Generate / Regenerate plan' to create a plan.")
        else:
            _show_plan(plan)
            if st.button("Healthy swaps"):
                for s in suggest_meal_swaps(meal_text(plan), plan.get("conditions", [])):
                    st.write("•", s)

    # -------------------------
    # 4) Pregnancy
    # -------------------------
    with tabs[3]:
        st.subheader("Pregnancy tracker")

        lmp = st.date_input("First day of last menstrual period", value=date.today())
        notes = st.text_area("Notes (optional)")
        if st.button("Save tracker"):
            try:
                portal.track_pregnancy(store, user_id, lmp, notes=notes)
            except ValueError as e:
                st.error(str(e))

        symptoms = st.multiselect(
            "Symptoms today",
            ["Nausea", "Fatigue", "Severe headache", "Blurred vision", "Severe abdominal pain",
             "Vaginal bleeding", "Reduced fetal movement", "Severe swelling"],
        )
        bp_text = st.text_input("Blood pressure (e.g., 120/80)")
        record_weight = st.checkbox("Record weight this week")
        weight = gain = None
        if record_weight:
            weight = st.number_input("Current weight (lb)", min_value=50.0, max_value=500.0, value=150.0, step=0.1)
            gain = st.number_input("Weight gain this week (lb)", min_value=-10.0, max_value=10.0, value=0.0, step=0.1)

        try:
            if st.button("Log today's check"):
                overview = portal.log_pregnancy_check(
                    store, user_id, symptoms=symptoms, weight=weight, weekly_gain=gain,
                    blood_pressure=bp_text or None,
                )
                st.success("Logged ✅")
            else:
                overview = portal.pregnancy_overview(
                    store, user_id, symptoms=symptoms, blood_pressure=bp_text or None, weekly_gain=gain
                )
        except portal.NotFoundError:
            overview = None

        if overview:
            info = overview["pregnancy_info"]
            st.write(
                f"**Week {info['current_week']}**, trimester {info['trimester']} • "
                f"due date **{info['due_date']}**"
            )
            for alert in overview["health_alerts"]:
                (st.error if alert["level"] == "high" else st.warning)(alert["message"])
            for section, items in overview["weekly_recommendations"].items():
                with st.expander(section.title()):
                    for item in items:
                        st.write("•", item)

            tracker = overview["tracker"]
            if tracker["symptoms"] or tracker["weight_log"]:
                with st.expander("My log"):
                    for s in tracker["symptoms"][-10:]:
                        st.write(f"• {s['date']}: {s['type']}")
                    for w in tracker["weight_log"][-10:]:
                        st.write(f"• {w['date']}: weight {w['weight']} lb, gain {w['weekly_gain']} lb")

    # -------------------------
    # 5) Health Records
    # -------------------------
    with tabs[4]:
        st.subheader("Health records")

        with st.form("new_record"):
            title = st.text_input("Title")
            condition = st.text_input("Condition")
            description = st.text_area("Description")
            when = st.date_input("Date", value=date.today())
            if st.form_submit_button("Add record"):
                try:
                    portal.add_health_record(store, user_id, user_id, {
                        "title": title, "condition": condition, "description": description, "date": when,
                    })
                    st.success("Saved ✅")
                except (portal.PortalError, ValueError) as e:
                    st.error(str(e))

        for rec in portal.list_health_records(store, user_id, user_id):
            with st.expander(f"{rec['date']:%Y-%m-%d} • {rec['title']}"):
                st.write(f"**Condition:** {rec['condition']}")
                st.write(rec["description"])
                if rec.get("diagnosis"):
                    st.write(f"**Diagnosis:** {rec['diagnosis']}")
                if st.button("Share with my doctors", key=f"share_rec_{rec['id']}"):
                    portal.share_health_record(store, user_id, rec["id"])
                    st.success("Shared ✅")

    # -------------------------
    # 6) Doctors & Chat
    # -------------------------
    with tabs[5]:
        st.subheader("Find a doctor")

        connected_ids = {u["id"] for u in portal.connected_users(store, user_id)}
        for doc in store.list_doctors():
            col_a, col_b = st.columns([3, 1])
            with col_a:
                st.write(f"**{doc['name']}** — {doc.get('specialization') or 'General'}")
            with col_b:
                if doc["id"] in connected_ids:
                    st.caption("Connected")
                elif st.button("Request", key=f"req_{doc['id']}"):
                    try:
                        portal.request_connection(store, user_id, doc["id"])
                        st.success("Request sent ✅")
                    except portal.PortalError as e:
                        st.error(str(e))

        st.write("### Chat")
        doctors = portal.connected_users(store, user_id)
        if not doctors:
            st.info("Connect with a doctor to start chatting.")
        else:
            other = st.selectbox("Doctor", doctors, format_func=lambda d: d["name"])
            _chat_panel(other)

# =========================
# Doctor views
# =========================
else:
    tabs = st.tabs(["1) Alerts", "2) Requests", "3) Patients", "4) Chat"])

    with tabs[0]:
        st.subheader("Patients needing care")
        alerts = portal.doctor_alerts(store, user_id)
        if not alerts:
            st.info("No connected patient currently needs attention.")
        for alert in alerts:
            v = alert["vitals"]
            (st.error if alert["level"] == "urgent" else st.warning)(
                f"{alert['patient']['name']}: {', '.join(v['assessment']['concerns'])} "
                f"(recorded {v['recorded_at']:%Y-%m-%d %H:%M})"
            )

    with tabs[1]:
        st.subheader("Connection requests")
        requests = portal.pending_requests(store, user_id)
        if not requests:
            st.info("No pending requests.")
        for req in requests:
            st.write(f"**{req['patient']['name']}** — {req.get('reason') or 'No reason given'}")
            col_a, col_b = st.columns(2)
            if col_a.button("Approve", key=f"ok_{req['id']}"):
                portal.respond_to_request(store, user_id, req["id"], "approved")
                st.rerun()
            if col_b.button("Reject", key=f"no_{req['id']}"):
                portal.respond_to_request(store, user_id, req["id"], "rejected")
                st.rerun()

    with tabs[2]:
        st.subheader("My patients")
        patients = [u for u in portal.connected_users(store, user_id) if u["role"] == "patient"]
        if not patients:
            st.info("No connected patients yet.")
        else:
            patient = st.selectbox("Patient", patients, format_func=lambda p: p["name"])

            history = portal.vitals_history(store, user_id, patient["id"])
            if history:
                df = vitals_frame(history)
                st.dataframe(df, use_container_width=True)
                st.pyplot(plot_vitals_trend(df, ["systolic", "diastolic", "heart_rate"]))
            else:
                st.info("No vitals recorded yet.")

            st.write("### Health records")
            for rec in portal.list_health_records(store, user_id, patient["id"]):
                st.write(f"• {rec['date']:%Y-%m-%d} **{rec['title']}** ({rec['condition']})")

            with st.form("doctor_record"):
                title = st.text_input("Title")
                condition = st.text_input("Condition")
                diagnosis = st.text_input("Diagnosis")
                description = st.text_area("Description")
                if st.form_submit_button("Add record"):
                    try:
                        portal.add_health_record(store, user_id, patient["id"], {
                            "title": title, "condition": condition, "diagnosis": diagnosis,
                            "description": description, "date": datetime.now(),
                        })
                        st.success("Saved ✅")
                    except (portal.PortalError, ValueError) as e:
                        st.error(str(e))

    with tabs[3]:
        st.subheader("Chat")
        patients = portal.connected_users(store, user_id)
        if not patients:
            st.info("No connected patients yet.")
        else:
            other = st.selectbox("Patient", patients, format_func=lambda p: p["name"], key="chat_patient")
            _chat_panel(other)
