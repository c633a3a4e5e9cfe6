import os
import sys
import json
import requests
import streamlit as st
from typing import Dict, Any
from dotenv import load_dotenv
from pathlib import Path

load_dotenv()

# If BACKEND_URL is not set, run in local mode (call Python modules directly)
BACKEND_URL = os.getenv("BACKEND_URL", "").strip().rstrip("/")
LOCAL_MODE = BACKEND_URL == ""

# Ensure project root is on sys.path when running on Streamlit Cloud
repo_root = Path(__file__).resolve().parents[1]
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from frontend.views import coerce_plan, day_details, nutrition_table, overview_table, schedule_tables  # noqa: E402
from frontend.export import export_plan_pdf  # noqa: E402

if LOCAL_MODE:
    # Load secrets into environment for code that reads os.environ
    try:
        for name in ("OPENROUTER_API_KEY", "OPENROUTER_API_URL", "OPENROUTER_MODEL"):
            if name in st.secrets:
                os.environ[name] = str(st.secrets[name]).strip()
    except FileNotFoundError:
        pass
    # Lazy import so remote mode doesn't need the backend stack configured
    from backend.planner import Planner
    from backend.llm import LLMError
    from backend.validation import parse_plan_request, validate_plan_request
    if "planner" not in st.session_state:
        st.session_state.planner = Planner()

st.set_page_config(page_title="AI Fitness Planner", page_icon="💪", layout="wide")

st.title("💪 AI Fitness Planner")
st.caption("Get a personalized workout and nutrition plan generated for your goals and constraints.")

with st.sidebar:
    st.header("Configuration")
    mode_label = "Local (in-app)" if LOCAL_MODE else f"Remote: {BACKEND_URL}"
    st.write(f"Mode: {mode_label}")
    if st.button("Health Check"):
        if LOCAL_MODE:
            st.success("Local mode OK: running planner in-process")
        else:
            try:
                r = requests.get(f"{BACKEND_URL}/api/health", timeout=5)
                st.success(f"API OK: {r.json()}")
            except requests.RequestException as e:
                st.error(f"API not reachable: {e}")


def request_plan(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Return the generate-plan response body, or raise RuntimeError with a user-facing message."""
    if LOCAL_MODE:
        validation = validate_plan_request(payload)
        if not validation.valid:
            raise RuntimeError(validation.error)
        try:
            plan = st.session_state.planner.generate_plan(parse_plan_request(payload))
        except LLMError as e:
            raise RuntimeError(e.message if not e.details else f"{e.message}: {e.details}") from e
        return plan.model_dump(by_alias=True)

    try:
        resp = requests.post(f"{BACKEND_URL}/api/generate-plan", json=payload, timeout=120)
    except requests.RequestException as e:
        raise RuntimeError(f"API not reachable: {e}") from e
    if not resp.ok:
        try:
            body = resp.json()
            message = body.get("error") or resp.text
            if body.get("details"):
                message += f": {body['details']}"
        except ValueError:
            message = resp.text
        raise RuntimeError(f"Server error ({resp.status_code}): {message}")
    return resp.json()


def render_structured(data: Dict[str, Any]) -> bool:
    plan = coerce_plan(data)
    if plan is None:
        return False

    overview = overview_table(plan)
    if not overview.empty:
        st.subheader("🎯 Plan Overview")
        st.table(overview.set_index("Field"))

    schedule = schedule_tables(plan)
    if schedule:
        st.subheader("📅 Weekly Workout Schedule")
        for (title, exercises), day in zip(schedule, plan.weekly_schedule or []):
            with st.expander(title, expanded=True):
                details = day_details(day)
                if details:
                    st.caption(" · ".join(f"{k}: {v}" for k, v in details))
                if exercises.empty:
                    st.info("No exercises listed for this day.")
                else:
                    st.dataframe(exercises, hide_index=True, use_container_width=True)

    nutrition = nutrition_table(plan)
    if not nutrition.empty:
        st.subheader("🍎 Nutrition Guidelines")
        st.table(nutrition.set_index("Field"))

    # building the PDF is slow, so only do it when asked
    if st.button("Prepare PDF"):
        st.session_state.pdf = None
        try:
            st.session_state.pdf = export_plan_pdf(plan)
        except ImportError as e:
            st.caption(f"PDF export unavailable: {e}")
        except Exception as e:
            st.caption(f"PDF export failed: {e}")
    if st.session_state.get("pdf"):
        st.download_button(
            "Download Plan (PDF)", data=st.session_state.pdf, file_name="fitness-plan.pdf", mime="application/pdf"
        )
    return True


st.subheader("Tell us about you")
col1, col2, col3 = st.columns(3)
with col1:
    goal = st.selectbox("Primary Goal", ["Gain Muscle", "Lose Fat", "Both"], index=0)
    experience = st.selectbox("Experience", ["Beginner", "Intermediate", "Advanced"], index=0)
with col2:
    days = st.slider("Days per week", min_value=1, max_value=7, value=3)
    session_length = st.slider("Session length (min)", min_value=15, max_value=180, value=45, step=5)
with col3:
    equipment = st.text_input("Equipment access", placeholder="e.g., full gym, dumbbells only, none")

injuries = st.text_area("Injuries or conditions (optional)", placeholder="e.g., lower back pain, bad knee")
preferences = st.text_area("Training preferences (optional)", placeholder="e.g., prefer compound lifts, no running")
dietary_notes = st.text_area("Dietary notes (optional)", placeholder="e.g., vegetarian, lactose intolerant")

if st.button("Generate Plan", type="primary"):
    payload = {
        "goal": goal,
        "equipmentAccess": equipment.strip() or "None",
        "daysPerWeek": int(days),
        "sessionLength": int(session_length),
        "experience": experience,
        "injuries": injuries.strip() or "None",
        "preferences": preferences.strip() or "None",
        "dietaryNotes": dietary_notes.strip() or "None",
    }
    try:
        with st.spinner("Generating your plan..."):
            st.session_state.result = request_plan(payload)
            st.session_state.pop("pdf", None)
    except RuntimeError as e:
        st.error(str(e))
        st.stop()

result = st.session_state.get("result")
if result:
    st.success(result.get("message", "Plan generated!"))
    readable = result.get("rawResponse", "")
    if not render_structured(result.get("data")):
        # No usable structure: show the model's text as-is
        st.text(readable)
    else:
        with st.expander("Readable plan"):
            st.markdown(readable)

    dl1, dl2, dl3 = st.columns(3)
    with dl1:
        st.download_button("Download Plan (Markdown)", data=readable, file_name="fitness-plan.md", mime="text/markdown")
    with dl2:
        if result.get("data") is not None:
            st.download_button(
                "Download Plan (JSON)",
                data=json.dumps(result["data"], indent=2),
                file_name="fitness-plan.json",
                mime="application/json",
            )
    with dl3:
        if st.button("Generate another plan"):
            st.session_state.pop("result", None)
            st.session_state.pop("pdf", None)
            st.rerun()

st.markdown("---")
st.caption("Always consult a healthcare professional before starting a new exercise or nutrition program.")
