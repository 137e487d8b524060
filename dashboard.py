"""
Streamlit dashboard for the SweatSmart climate risk simulation.
"""

from __future__ import annotations

import time
from typing import Dict

import pandas as pd
import streamlit as st

import config
from alert_system import AlertSystem
from backend.sweat_risk import SweatRiskResult, classify, heat_index, risk_severity, should_trigger_alert
from data_logger import DataLogger
from sensor_simulator import EDA_MODES, ClimateSimulator

PAGE_TITLE = "SweatSmart Climate Monitor"
REFRESH_MS = 5000  # 5 seconds
MAX_HISTORY = 720  # keep last hour of data

LEVEL_HEX = {
    "safe": "#4ade80",
    "low": "#fde047",
    "moderate": "#facc15",
    "high": "#f87171",
    "extreme": "#ef4444",
}


def init_state():
    if "data_logger" not in st.session_state:
        st.session_state.data_logger = DataLogger()
    if "alert_system" not in st.session_state:
        st.session_state.alert_system = AlertSystem(st.session_state.data_logger)
    if "simulators" not in st.session_state:
        st.session_state.simulators: Dict[str, ClimateSimulator] = {}
    if "history" not in st.session_state:
        st.session_state.history: Dict[str, pd.DataFrame] = {}
    if "alerts" not in st.session_state:
        st.session_state.alerts = []
    if "last_alert_at" not in st.session_state:
        st.session_state.last_alert_at: Dict[str, float] = {}


def get_simulator(user_id: str) -> ClimateSimulator:
    sims = st.session_state.simulators
    if user_id not in sims:
        sims[user_id] = ClimateSimulator(user_id=user_id)
    return sims[user_id]


def append_history(user_id: str, reading: Dict) -> pd.DataFrame:
    df = st.session_state.history.get(user_id)
    row = pd.DataFrame([{
        "timestamp": pd.to_datetime(reading["timestamp"], unit="s"),
        "temperature": reading["temperature"],
        "heat_index": heat_index(reading["temperature"], reading["humidity"]),
        "humidity": reading["humidity"],
        "uv_index": reading["uv_index"],
        "eda": reading["eda"],
        "risk_level": reading.get("risk_level", ""),
    }])
    if df is None or df.empty:
        df = row
    else:
        df = pd.concat([df, row], ignore_index=True)
    if len(df) > MAX_HISTORY:
        df = df.iloc[-MAX_HISTORY:]
    st.session_state.history[user_id] = df
    return df


def status_badge(risk: SweatRiskResult) -> str:
    color = LEVEL_HEX.get(risk.level, "#9ca3af")
    return f"""
    <div style="padding:8px 12px;border-radius:8px;background:{color};color:black;font-weight:700;">
        {risk.message.upper()} &middot; {risk.description}
    </div>
    """


def render_metrics(reading: Dict):
    col1, col2, col3, col4, col5 = st.columns(5)
    col1.metric("Temperature (°C)", f"{reading['temperature']:.1f}")
    col2.metric("Feels like (°C)", f"{heat_index(reading['temperature'], reading['humidity']):.1f}")
    col3.metric("Humidity (%)", f"{reading['humidity']:.0f}")
    col4.metric("UV Index", f"{reading['uv_index']:.1f}")
    col5.metric("EDA (µS)", "-" if reading["eda"] is None else f"{reading['eda']:.1f}")


def render_charts(history: pd.DataFrame):
    if history is None or history.empty:
        st.info("Waiting for data...")
        return
    st.line_chart(history.set_index("timestamp")[["temperature", "heat_index", "humidity"]])
    st.area_chart(history.set_index("timestamp")[["uv_index", "eda"]])


def render_alerts():
    if not st.session_state.alerts:
        st.caption("No alerts yet.")
        return
    st.write("Recent Alerts")
    for msg in reversed(st.session_state.alerts[-10:]):
        st.warning(msg, icon="⚠️")


def main():
    st.set_page_config(page_title=PAGE_TITLE, page_icon="💧", layout="wide")
    init_state()
    st.title(PAGE_TITLE)
    st.caption("Simulated weather and EDA readings classified for hyperhidrosis sweat risk.")

    user_id = st.selectbox("Select Profile", ["User-1", "User-2", "User-3"], index=0)
    simulator = get_simulator(user_id)

    st.sidebar.header("Data Source")
    simulator.set_mode(st.sidebar.selectbox("EDA mode", list(EDA_MODES), index=list(EDA_MODES).index(simulator.mode)))
    uploaded = st.sidebar.file_uploader("Optional: Upload CSV data", type=["csv"])
    if uploaded:
        df = pd.read_csv(uploaded)
        try:
            simulator.set_dataset(df)
            st.sidebar.success("Dataset loaded for this profile.")
        except ValueError as exc:
            st.sidebar.error(f"Dataset error: {exc}")

    st.sidebar.header("Alert Thresholds")
    defaults = config.DEFAULT_THRESHOLDS
    thresholds = {
        "temperature": st.sidebar.slider("Temperature (°C)", 20, 40, int(defaults["temperature"])),
        "humidity": st.sidebar.slider("Humidity (%)", 30, 95, int(defaults["humidity"])),
        "uv_index": st.sidebar.slider("UV Index", 1, 11, int(defaults["uv_index"])),
    }

    st.sidebar.markdown("Report & Logs")
    if st.sidebar.button("Generate today's report"):
        report_path = st.session_state.data_logger.generate_daily_report()
        st.sidebar.success(f"Report saved to {report_path}")

    auto_refresh = st.sidebar.checkbox("Auto-refresh every 5 seconds", value=True)

    reading = simulator.get_reading()
    risk = classify(reading["temperature"], reading["humidity"], reading["uv_index"], reading["eda"])
    reading["risk_level"] = risk.level

    st.session_state.data_logger.log_reading(reading)

    st.markdown(status_badge(risk), unsafe_allow_html=True)
    render_metrics(reading)

    history = append_history(user_id, reading)
    render_charts(history)

    hdss = st.radio("Log an episode now (HDSS)", [1, 2, 3, 4], horizontal=True, index=None)
    if hdss is not None and st.button("Save episode"):
        st.session_state.data_logger.log_episode(reading, hdss)
        st.success("Episode logged with current conditions.")

    decision = should_trigger_alert(reading["temperature"], reading["humidity"], reading["uv_index"], thresholds)
    severity = risk_severity(risk.level)
    last = st.session_state.last_alert_at.get(user_id, 0.0)
    cooled_down = reading["timestamp"] - last >= config.ALERT_COOLDOWN
    if decision.should_alert and st.session_state.alert_system.should_alert(severity) and cooled_down:
        message, audio_bytes = st.session_state.alert_system.handle_alert(reading, risk)
        st.session_state.last_alert_at[user_id] = reading["timestamp"]
        st.session_state.alerts.append(message)
        st.toast(message, icon="🚨")
        st.audio(audio_bytes, format="audio/wav")

    with st.expander("Alert History"):
        render_alerts()

    with st.expander("Risk Detail"):
        st.table(pd.DataFrame({"trigger": risk.triggers or ["-"]}))
        st.caption(f"Severity: {severity} | Threshold triggers: {', '.join(decision.triggers) or '-'}")

    st.caption("Simulation ticks every 5 seconds. Upload a CSV to replay recorded data.")

    if auto_refresh:
        time.sleep(REFRESH_MS / 1000)
        st.rerun()


if __name__ == "__main__":
    main()
