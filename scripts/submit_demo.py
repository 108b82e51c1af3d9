#!/usr/bin/env python3
"""Submit a sample grievance to a running backend.

Usage:
    # Start the backend first:
    uvicorn grievance.web.app:create_app --factory --port 8080

    # Validate each step, then submit:
    python3 scripts/submit_demo.py

    # Attach a real file instead of the generated PDF stub:
    python3 scripts/submit_demo.py --attach ./receipt.pdf

    # Against a different host:
    python3 scripts/submit_demo.py --base-url http://localhost:9000

The payload goes through the same per-step rules the wizard runs, so a step
that fails here would also block the "Next" button.
"""

from __future__ import annotations

import argparse
import base64
import mimetypes
import sys
from datetime import date, timedelta
from pathlib import Path

import httpx

DEFAULT_BASE_URL = "http://localhost:8080"


def build_payload(attachment: Path | None) -> dict:
    if attachment is not None:
        payload = attachment.read_bytes()
        name = attachment.name
        mime_type = mimetypes.guess_type(name)[0] or "application/octet-stream"
    else:
        payload = b"%PDF-1.4\n% demo attachment\n"
        name = "water-bill.pdf"
        mime_type = "application/pdf"

    return {
        "fullName": "Asha Verma",
        "email": "asha.verma@example.in",
        "phone": "9876543210",
        "address": "14 MG Road, Bengaluru 560001",
        "category": "Billing",
        "subject": "Charged twice for the March water bill",
        "description": (
            "The March water bill was debited twice from my account on the same day. "
            "Both transactions show the same consumer number and amount. "
            "Please refund the duplicate charge."
        ),
        "incidentDate": (date.today() - timedelta(days=3)).isoformat(),
        "files": [
            {
                "name": name,
                "size": len(payload),
                "type": mime_type,
                "content": base64.b64encode(payload).decode("ascii"),
            }
        ],
        "agreedToTerms": True,
    }


def main() -> int:
    parser = argparse.ArgumentParser(description="Submit a demo grievance")
    parser.add_argument("--base-url", default=DEFAULT_BASE_URL, help="Backend base URL")
    parser.add_argument("--attach", type=Path, help="File to attach instead of the stub PDF")
    args = parser.parse_args()

    grievance = build_payload(args.attach)

    with httpx.Client(base_url=args.base_url, timeout=30.0) as client:
        try:
            form = client.get("/api/grievances/form").raise_for_status().json()
        except httpx.HTTPError as exc:
            print(f"Cannot reach backend at {args.base_url}: {exc}")
            return 1

        for step in form["steps"]:
            resp = client.post(f"/api/grievances/validate/{step['id']}", json=grievance)
            result = resp.json()
            status = "ok" if result.get("valid") else f"FAILED {result.get('errors')}"
            print(f"  {step['title']:<20} {status}")
            if not result.get("valid"):
                return 1

        resp = client.post("/api/grievances", json=grievance)
        result = resp.json()
        if not result.get("success"):
            print(f"Submission rejected: {result.get('message')} {result.get('errors') or ''}")
            return 1
        print(f"{result['message']} Reference ID: {result['referenceId']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
