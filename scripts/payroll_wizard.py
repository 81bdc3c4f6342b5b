#!/usr/bin/env python
from __future__ import annotations

import argparse
import time

from backend.client import CalculationsNotReady, NetworkError, PayrollApiClient, PayrollApiError, PayrollWizard, Step
from backend.client.wizard import REFRESH_INTERVAL
from backend.core.schema import EMPLOYEE_FIELDS
from backend.core.validation import ValidationError, humanize_field


def _prompt_employee() -> dict[str, str]:
    return {field: input(f"{humanize_field(field).capitalize()}: ").strip() for field in EMPLOYEE_FIELDS}


def _print_view(title: str, lines: dict[str, str]) -> None:
    print(f"\n{title}")
    width = max(len(label) for label in lines)
    for label, amount in lines.items():
        print(f"  {label.ljust(width)}  {amount:>14}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Walk the three payroll steps against a running server")
    parser.add_argument("--url", default="http://localhost:3000", help="Server base URL")
    parser.add_argument("--attempts", type=int, default=30, help="Polls before giving up on calculations")
    parser.add_argument("--interval", type=float, default=1.0, help="Seconds between polls")
    parser.add_argument("--watch", type=int, default=0, help="Refresh the wage view this many times after submitting")
    args = parser.parse_args()

    api = PayrollApiClient(args.url)
    wizard = PayrollWizard(api, max_attempts=args.attempts, interval=args.interval)
    try:
        status = api.auth_status()
        if not status.get("authenticated"):
            print(f"Authenticate first: {api.auth_url()}")
            return

        print("Step 1: employee details")
        try:
            wizard.submit(_prompt_employee())
        except ValidationError as exc:
            print(f"Error: {exc.message}")
            return
        except (PayrollApiError, NetworkError, CalculationsNotReady) as exc:
            print(f"Error saving employee data: {exc}")
            return

        print(wizard.summary())
        _print_view("Step 2: wages", wizard.wage_view())
        wizard.go_to(Step.DEDUCTIONS)
        _print_view("Step 3: deductions and net pay", wizard.deduction_view())

        for _ in range(args.watch):
            time.sleep(REFRESH_INTERVAL)
            wizard.refresh()
            _print_view("Latest wages", wizard.wage_view())
    finally:
        api.close()


if __name__ == "__main__":
    main()
