#!/usr/bin/env python3
# scripts/seed_rules.py
"""
Push a rule file to a running RuleFlow service and smoke-test it.
Validates, saves, then runs a handful of sample calculations.
"""

import json
import os
import sys
import time
from typing import Dict

import requests

# Configuration
API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000")
RULES_FILE = os.getenv("RULES_FILE", "rules/loyalty-rules.json")
RETRY_ATTEMPTS = 3

SAMPLE_BOOKINGS = [
    {"tier": "gold", "total_spend": 6000, "booking_date": "2025-11-03"},
    {"tier": "gold", "total_spend": 6000, "booking_date": "2025-11-01"},
    {"tier": "silver", "total_spend": 1000, "booking_date": "2025-11-03"},
    {"tier": "platinum", "total_spend": 12000, "booking_date": "2025-12-20"},
]


def log(message: str, level: str = "INFO"):
    """Print formatted log message."""
    print(f"[{level}] {message}")


def make_request(method: str, endpoint: str, data: dict = None) -> Dict:
    """Make HTTP request with retry logic. 4xx responses are returned, not retried."""
    url = f"{API_BASE_URL}{endpoint}"

    for attempt in range(RETRY_ATTEMPTS):
        try:
            if method == "POST":
                response = requests.post(url, json=data, timeout=5)
            elif method == "GET":
                response = requests.get(url, timeout=5)
            else:
                raise ValueError(f"Unsupported method: {method}")

            if 400 <= response.status_code < 500:
                return response.json()
            response.raise_for_status()
            return response.json()
        except requests.exceptions.RequestException as e:
            if attempt < RETRY_ATTEMPTS - 1:
                log(f"Request failed, retrying... ({attempt + 1}/{RETRY_ATTEMPTS})", "WARN")
                time.sleep(1)
            else:
                log(f"Request failed after {RETRY_ATTEMPTS} attempts: {e}", "ERROR")
                raise

    return {}


def push_rules(path: str) -> int:
    with open(path, encoding="utf-8") as f:
        document = json.load(f)
    rules = document["rules"] if isinstance(document, dict) else document

    log(f"Validating {len(rules)} rules from {path}")
    check = make_request("POST", "/api/rules/validate", {"rules": rules})
    if not check.get("success"):
        for detail in check.get("details", []):
            log(f"Rule #{detail['rule_index']} ({detail['rule_id']}): {detail['error']}", "ERROR")
        raise ValueError("Rule validation failed")

    saved = make_request("POST", "/api/rules", {"rules": rules})
    log(f"Saved {saved.get('rulesCount', 0)} rules", "SUCCESS")
    return saved.get("rulesCount", 0)


def run_samples():
    for booking in SAMPLE_BOOKINGS:
        response = make_request("POST", "/api/calculate", booking)
        result = response.get("result", {})
        log(f"{booking['tier']} / {booking['total_spend']} on {booking['booking_date']}: "
            f"{result.get('discount_percent')}% off → {result.get('final_amount')} "
            f"({result.get('message')})")


def main():
    try:
        log("Waiting for server to be ready...")
        for i in range(10):
            try:
                requests.get(f"{API_BASE_URL}/api/health", timeout=1)
                break
            except requests.exceptions.RequestException:
                if i < 9:
                    time.sleep(1)

        push_rules(RULES_FILE)
        log("")
        run_samples()
        log("Seeding complete", "SUCCESS")
    except Exception as e:
        log(f"Seeding failed: {e}", "CRITICAL")
        sys.exit(1)


if __name__ == "__main__":
    main()
