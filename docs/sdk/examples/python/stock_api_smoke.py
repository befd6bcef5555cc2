import os
import sys
import uuid

import requests

base_url = os.getenv("STOCKLEDGER_BASE_URL", "http://localhost:8080").rstrip("/")


def main() -> int:
    barcode = f"smoke-{uuid.uuid4().hex[:8]}"

    health = requests.get(f"{base_url}/health", timeout=15)
    health.raise_for_status()

    requests.post(
        f"{base_url}/products",
        json={"barcode": barcode, "name": "Smoke test item"},
        timeout=15,
    ).raise_for_status()

    move = requests.post(
        f"{base_url}/stock/move",
        json={"action": "IN", "barcode": barcode, "qty": 10, "location": "A"},
        timeout=15,
    )
    move.raise_for_status()

    transfer = requests.post(
        f"{base_url}/stock/transfer",
        json={"barcode": barcode, "qty": 4, "fromLocation": "A", "toLocation": "B"},
        timeout=15,
    )
    transfer.raise_for_status()

    levels = transfer.json()
    print(f"Server time: {health.json()['time']}")
    print(f"After IN: {move.json()['level']}")
    print(f"After transfer: A={levels['from_level']} B={levels['to_level']}")
    return 0


if __name__ == "__main__":
    try:
        raise SystemExit(main())
    except requests.RequestException as exc:
        print(f"Stock API probe failed: {exc}", file=sys.stderr)
        raise SystemExit(1)
