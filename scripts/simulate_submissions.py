# scripts/simulate_submissions.py
import requests
import random
import time
import sys

BASE_URL = "http://localhost:8000"
PROJECT_ID = "demo-readiness"
TIERS = [None, "free", "basic", "premium", "enterprise", "gold"]  # "gold" is not a tier


def generate_responses():
    responses = [
        {"fieldId": "Q1", "value": random.choice(["yes", "no", "maybe"])},
        {"fieldId": "Q2", "value": random.choice(["yes", "no"])},
        {"fieldId": "Q3", "value": random.choice([0, 3, 6, 12, "abc"])},
        {"fieldId": "Q4", "value": random.randint(0, 6)},
    ]
    if random.random() < 0.1:
        responses.append({"fieldId": "Q99", "value": "stray"})
    return responses


def run_simulation(n=50):
    print(f"Starting submission simulation ({n} submissions) against {PROJECT_ID}...")

    for i in range(n):
        payload = {"responses": generate_responses()}
        tier = random.choice(TIERS)
        if tier is not None:
            payload["callerTier"] = tier

        try:
            res = requests.post(f"{BASE_URL}/public/tools/{PROJECT_ID}/calculate", json=payload)
            if res.status_code == 200:
                data = res.json()
                partial = " (partial)" if data["isPartial"] else ""
                print(
                    f"[{i+1}/{n}] tier={tier or '-'} | score={data['rawScore']:g} | "
                    f"{data['outcome']['label']}{partial} | anomalies={len(data['anomalies'])}"
                )
            else:
                print(f"[{i+1}/{n}] Error: {res.status_code} {res.text}")
        except requests.RequestException as e:
            print(f"Connection Error: {e}")
            break

        time.sleep(0.05)

    print("\nSimulation complete.")


if __name__ == "__main__":
    try:
        requests.get(f"{BASE_URL}/")
    except requests.RequestException:
        print("Server not running!")
        sys.exit(1)

    run_simulation()
