"""
CLI entry-point for quick climate simulation without the Streamlit UI.
"""

from __future__ import annotations

import argparse
import time

from backend.sweat_risk import classify, heat_index, risk_severity
from data_logger import DataLogger
from sensor_simulator import EDA_MODES, ClimateSimulator


def run_cli(user_id: str = "User-CLI", iterations: int = 20, interval: float = 1.0, mode: str = "Resting",
            temperature: float = 25.0, humidity: float = 60.0, uv_index: float = 5.0) -> None:
    simulator = ClimateSimulator(user_id, temperature=temperature, humidity=humidity, uv_index=uv_index)
    simulator.set_mode(mode)
    logger = DataLogger()

    for _ in range(iterations):
        reading = simulator.get_reading()
        risk = classify(reading["temperature"], reading["humidity"], reading["uv_index"], reading["eda"])
        reading["risk_level"] = risk.level
        logger.log_reading(reading)
        print(
            f"{reading['user_id']} | Temp {reading['temperature']:.1f} | "
            f"Humidity {reading['humidity']:.0f} | UV {reading['uv_index']:.1f} | "
            f"EDA {reading['eda']:.1f} | HI {heat_index(reading['temperature'], reading['humidity']):.1f} | "
            f"{risk.message.upper()} ({risk_severity(risk.level)})"
        )
        time.sleep(interval)


def main() -> None:
    parser = argparse.ArgumentParser(description="Simulate climate readings and print sweat risk.")
    parser.add_argument("--user", default="User-CLI")
    parser.add_argument("--iterations", type=int, default=20)
    parser.add_argument("--interval", type=float, default=1.0)
    parser.add_argument("--mode", choices=list(EDA_MODES), default="Resting")
    parser.add_argument("--temperature", type=float, default=25.0)
    parser.add_argument("--humidity", type=float, default=60.0)
    parser.add_argument("--uv-index", type=float, default=5.0)
    args = parser.parse_args()
    run_cli(args.user, args.iterations, args.interval, args.mode, args.temperature, args.humidity, args.uv_index)


if __name__ == "__main__":
    main()
