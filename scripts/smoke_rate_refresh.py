"""Smoke check for the rate refresh against the live currency feed.

Builds one app on the static provider and one on external-http (real network),
sets a USD price on both, refreshes, and prints the resulting rates and totals
so the effect of today's rate (or a graceful failure notice) is visible.
"""

import json
import os
import sys
import tempfile

from fastapi.testclient import TestClient

from app.core.config import Settings
from app.main import create_app


def run():
    out = {}
    with tempfile.TemporaryDirectory() as d:
        for provider in ("static", "external-http"):
            settings = Settings(
                data_dir=d,
                db_path=os.path.join(d, f"{provider}.db"),
                exchange_rate_provider=provider,
            )
            client = TestClient(create_app(settings_override=settings))
            client.put("/calculator/price", json={"currency": "USD", "value": 750})
            resp = client.post("/calculator/rates/refresh").json()
            out[provider] = {
                "status": resp["status"],
                "message": resp["message"],
                "rates": resp["state"]["rates"],
                "total_with_buffer_usd": resp["state"]["breakdown_usd"]["total_with_buffer"],
                "idr_equivalent": resp["state"]["display"]["idr_equivalent"],
            }
    print(json.dumps(out, indent=2))


if __name__ == "__main__":
    sys.path.append(os.getcwd())
    run()
