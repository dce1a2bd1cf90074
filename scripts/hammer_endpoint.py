#!/usr/bin/env python
"""Dispara N requisições concorrentes com o MESMO token contra um servidor.

Verifica, de fora do processo, que apenas uma requisição é processada por
token.

Uso:
    python scripts/hammer_endpoint.py --base-url http://localhost:8000 --workers 100
"""

from __future__ import annotations

import argparse
from collections import Counter
from concurrent.futures import ThreadPoolExecutor

import httpx

GENERATE_PATH = "/idempotent/generatorToken"
PROTECTED_PATH = "/idempotent/testInterface"


def _classify(response: httpx.Response) -> str:
    if response.status_code == 200:
        return "success"
    if response.status_code == 409:
        return "duplicate"
    return f"http_{response.status_code}"


def hammer(base_url: str, workers: int, business_type: str, timeout: float) -> Counter[str]:
    """Emite um token e o envia a partir de `workers` threads."""
    with httpx.Client(base_url=base_url, timeout=timeout) as client:
        response = client.get(GENERATE_PATH, params={"businessType": business_type})
        response.raise_for_status()
        token = response.json()["token"]
        print(f"Token emitido: {token[:16]}...")

        def _call(_: int) -> str:
            try:
                return _classify(client.get(PROTECTED_PATH, params={"token": token}))
            except httpx.HTTPError as e:
                return f"transport_{type(e).__name__}"

        with ThreadPoolExecutor(max_workers=workers) as executor:
            return Counter(executor.map(_call, range(workers)))


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--base-url", default="http://localhost:8000")
    parser.add_argument("--workers", type=int, default=100)
    parser.add_argument("--business-type", default="create_order")
    parser.add_argument("--timeout", type=float, default=30.0)
    args = parser.parse_args()

    tally = hammer(args.base_url, args.workers, args.business_type, args.timeout)
    for outcome, count in sorted(tally.items()):
        print(f"  - {outcome}: {count}")

    if tally["success"] != 1:
        print(f"❌ ERRO: esperado 1 sucesso, obtido {tally['success']}")
        return 1
    print("✅ Apenas uma requisição processada")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
