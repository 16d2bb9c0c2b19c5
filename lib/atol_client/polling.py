from __future__ import annotations

import json
import time

REPORT_FINAL_STATUSES = frozenset({"done", "fail"})


def parse_report(raw: str | None) -> dict | None:
    if not raw:
        return None
    try:
        data = json.loads(raw)
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def wait_for_report(
        client,
        uuid: str,
        *,
        timeout_s: int = 300,
        interval_s: int = 5,
        on_status: callable | None = None,
        on_timeout: callable | None = None,
) -> dict | None:
    deadline = time.monotonic() + max(0, int(timeout_s))
    last_status = ""
    report = None
    while True:
        current = parse_report(client.check_status(uuid))
        if current is not None:
            report = current
            status = str(report.get("status") or "").lower()
            if status and status != last_status:
                if on_status:
                    on_status(uuid, status)
                last_status = status
            if status in REPORT_FINAL_STATUSES:
                return report
        if time.monotonic() >= deadline:
            if on_timeout:
                on_timeout(uuid)
            return report
        time.sleep(max(1, int(interval_s)))
