"""
Demo runner that replays predefined climate scenarios into the backend via HTTP.
Assumes server running on localhost:5000 with the seeded demo user.
"""
from __future__ import annotations

import time
from pathlib import Path

import pandas as pd
import requests

SERVER = "http://localhost:5000"
USER_ID = "U-001"


def send_csv(path: Path, session: requests.Session):
    df = pd.read_csv(path)
    start = time.time()
    for _, row in df.iterrows():
        payload = {
            "temperature": float(row.temperature),
            "humidity": float(row.humidity),
            "uv_index": float(row.uv_index),
        }
        if not pd.isna(row.eda):
            payload["eda"] = float(row.eda)
        r = session.post(f"{SERVER}/climate/users/{USER_ID}/check", json=payload)
        r.raise_for_status()
        body = r.json()
        print(f"{path.stem}: {body['message']:<18} {body['severity']:<9} {body['dispatch']['outcome']}")
        time.sleep(1)
    print(f"Scenario {path.name} done in {time.time() - start:.1f}s")


def main():
    session = requests.Session()
    for scenario in [
        "scenario_comfortable.csv",
        "scenario_humid_afternoon.csv",
        "scenario_heatwave.csv",
    ]:
        send_csv(Path("demo_data") / scenario, session)


if __name__ == "__main__":
    main()
