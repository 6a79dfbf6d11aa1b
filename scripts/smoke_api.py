"""
Smoke test: check the employee API is up and can reach the upstream service.

Run (server must be running, e.g. `python -m employee_api`):
  python scripts/smoke_api.py
"""

from __future__ import annotations

import os

import httpx


API_BASE = os.getenv("EMPLOYEE_API_BASE", "http://127.0.0.1:8000")


def main() -> int:
    try:
        r = httpx.get(f"{API_BASE}/health", timeout=5)
        if r.status_code != 200:
            print(f"[FAIL] /health returned {r.status_code}")
            return 1
        print("[OK] API is up (/health 200)")

        r = httpx.get(f"{API_BASE}/api/v1/employee", timeout=60)
    except Exception as e:
        print(f"[FAIL] Could not reach API at {API_BASE}: {e}")
        print("Start it with: python -m employee_api")
        return 1

    if r.status_code != 200:
        print(f"[FAIL] /api/v1/employee returned {r.status_code}: {r.text}")
        return 1

    employees = r.json()
    print(f"[INFO] employees_count={len(employees)}")

    r = httpx.get(f"{API_BASE}/api/v1/employee/highestSalary", timeout=60)
    print(f"[OK] highestSalary={r.json() if r.status_code == 200 else r.status_code}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
