"""
Persistence smoke test.

Starts the API, posts a ping, restarts the API and checks the ping is
still listed. Needs a seeded user (run backend/seed_users.py first).
"""

import time
import subprocess
import httpx
import sys
import os
import signal

BASE_URL = "http://127.0.0.1:8000"
API_PREFIX = "/api"
USER_ID = int(os.getenv("SMOKE_USER_ID", "3"))

SERVER_CMD = [sys.executable, "-m", "uvicorn", "backend.app.main:app", "--host", "127.0.0.1", "--port", "8000"]


def wait_for_server(retries=10, delay=2):
    url = f"{BASE_URL}/health"
    print(f"Waiting for server at {url}...")
    for i in range(retries):
        try:
            resp = httpx.get(url)
            if resp.status_code == 200:
                print("✅ Server is up!")
                return True
        except httpx.TransportError:
            pass
        time.sleep(delay)
    print("❌ Server failed to start.")
    return False


def stop_server(proc):
    proc.send_signal(signal.SIGTERM)
    proc.wait()


def run_verification():
    # 1. Start Server (First Run)
    print("\n--- [Step 1] Starting Server (Initial) ---")
    proc = subprocess.Popen(
        SERVER_CMD,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        env={**os.environ, "DB_ECHO": "True"} # Enable echo to see SQL
    )

    try:
        if not wait_for_server():
            server_logs = proc.communicate(timeout=2)
            print("Server Stdout:", server_logs[0].decode())
            print("Server Stderr:", server_logs[1].decode())
            raise RuntimeError("Server start failed")

        # 2. Post a ping
        print("\n--- [Step 2] Posting Ping (Persistence Test) ---")
        ping = {
            "userId": USER_ID,
            "latitude": 19.07601234,
            "longitude": 72.87765432,
            "batt": 64,
            "activityType": "still",
        }
        resp = httpx.post(f"{BASE_URL}{API_PREFIX}/geo-tracking", json=ping)

        if resp.status_code == 201:
            record_id = resp.json()["id"]
            print(f"✅ Ping Stored (id={record_id})")
            print(resp.json())
        else:
            print(f"❌ Ping Failed: {resp.status_code} {resp.text}")
            raise RuntimeError("Ping failed")

    finally:
        print("\n--- [Step 3] Stopping Server ---")
        stop_server(proc)

    time.sleep(2) # Wait for port release

    # 3. Restart Server
    print("\n--- [Step 4] Restarting Server (Verification) ---")
    proc2 = subprocess.Popen(SERVER_CMD, stdout=subprocess.PIPE, stderr=subprocess.PIPE)

    try:
        if not wait_for_server():
            raise RuntimeError("Server restart failed")

        # 4. List the user's history
        print("\n--- [Step 5] Listing History (Post-Restart) ---")
        resp = httpx.get(f"{BASE_URL}{API_PREFIX}/geo-tracking", params={"userId": USER_ID})
        ids = [item["id"] for item in resp.json()] if resp.status_code == 200 else []

        if record_id in ids:
            print("✅ Ping Persisted Across Restart")
        else:
            print(f"❌ Ping Missing After Restart: {resp.status_code} {resp.text}")
            raise RuntimeError("Ping lost after restart")

    finally:
        print("\n--- [Step 6] Stopping Server ---")
        stop_server(proc2)

if __name__ == "__main__":
    run_verification()
