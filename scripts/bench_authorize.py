#!/usr/bin/env python3
"""Benchmark authorization: latency (p50, p95, p99) and decisions per second.

Sends POST /v1/authorize for a user of the caller's business with a number of
concurrent workers. The caller needs permission:read.

Usage:
  With Keycloak:
    export API_URL=http://localhost:8000 KEYCLOAK_URL=http://localhost:8080 \\
      KEYCLOAK_CLIENT_SECRET=... BENCH_USER=owner BENCH_PASSWORD=...
    python scripts/bench_authorize.py --requests 2000 --concurrency 20

  Behind a trusted proxy (TRUST_IDENTITY_HEADERS=true on the server):
    export BENCH_USER_ID=owner-1 BENCH_BUSINESS_ID=<uuid>
    python scripts/bench_authorize.py --permission customer:read
"""
from __future__ import annotations

import argparse
import asyncio
import os
import statistics
import sys
import time

import httpx


def get_token(
    keycloak_url: str,
    realm: str,
    client_id: str,
    client_secret: str,
    username: str,
    password: str,
) -> str:
    url = f"{keycloak_url.rstrip('/')}/realms/{realm}/protocol/openid-connect/token"
    r = httpx.post(
        url,
        data={
            "grant_type": "password",
            "client_id": client_id,
            "client_secret": client_secret,
            "username": username,
            "password": password,
        },
        headers={"Content-Type": "application/x-www-form-urlencoded"},
        timeout=30.0,
    )
    r.raise_for_status()
    return r.json()["access_token"]


def auth_headers() -> dict[str, str]:
    user_id = os.environ.get("BENCH_USER_ID")
    business_id = os.environ.get("BENCH_BUSINESS_ID")
    if user_id and business_id:
        return {"X-User-Id": user_id, "X-Business-Id": business_id}
    token = get_token(
        os.environ.get("KEYCLOAK_URL", "http://localhost:8080"),
        os.environ.get("KEYCLOAK_REALM", "tenantguard"),
        os.environ.get("KEYCLOAK_CLIENT_ID", "tenantguard-api"),
        os.environ.get("KEYCLOAK_CLIENT_SECRET", ""),
        os.environ.get("BENCH_USER", "testuser"),
        os.environ.get("BENCH_PASSWORD", "testpass"),
    )
    return {"Authorization": f"Bearer {token}"}


async def run(
    api_url: str,
    headers: dict[str, str],
    body: dict,
    total: int,
    concurrency: int,
) -> tuple[list[float], int, int]:
    latencies: list[float] = []
    errors = 0
    allowed = 0
    remaining = iter(range(total))

    async def worker(client: httpx.AsyncClient) -> None:
        nonlocal errors, allowed
        for _ in remaining:
            t0 = time.perf_counter()
            r = await client.post(f"{api_url}/v1/authorize", json=body, headers=headers)
            elapsed = time.perf_counter() - t0
            if r.status_code == 200:
                latencies.append(elapsed)
                allowed += r.json()["allowed"]
            else:
                errors += 1

    async with httpx.AsyncClient(timeout=30.0) as client:
        await asyncio.gather(*(worker(client) for _ in range(concurrency)))
    return latencies, errors, allowed


def main() -> int:
    parser = argparse.ArgumentParser(description="Benchmark authorization decisions")
    parser.add_argument("--requests", type=int, default=1000, help="Number of authorize requests")
    parser.add_argument("--concurrency", type=int, default=10, help="Concurrent clients")
    parser.add_argument("--user-id", type=str, default=None, help="User to evaluate (default: caller)")
    parser.add_argument("--permission", type=str, default="customer:read", help="Permission to evaluate")
    parser.add_argument("--output", type=str, default="/results/bench_authorize.txt", help="Output file path")
    args = parser.parse_args()

    api_url = os.environ.get("API_URL", "http://localhost:8000").rstrip("/")
    print("Resolving identity...")
    headers = auth_headers()
    user_id = args.user_id or os.environ.get("BENCH_USER_ID") or os.environ.get("BENCH_USER", "testuser")
    body = {"user_id": user_id, "permission": args.permission}

    print(f"Running {args.requests} authorize requests with {args.concurrency} clients...")
    start_total = time.perf_counter()
    latencies, errors, allowed = asyncio.run(
        run(api_url, headers, body, args.requests, args.concurrency)
    )
    total_elapsed = time.perf_counter() - start_total

    n = len(latencies)
    if n == 0:
        print("No successful authorize requests.")
        return 1

    rate = n / total_elapsed
    ordered = sorted(latencies)
    p50 = statistics.median(latencies) * 1000
    p95 = ordered[int(n * 0.95) - 1] * 1000 if n >= 20 else p50
    p99 = ordered[int(n * 0.99) - 1] * 1000 if n >= 100 else p95

    summary = (
        f"Authorize benchmark (permission={args.permission}, requests={n}, errors={errors}, "
        f"allowed={allowed}, concurrency={args.concurrency})\n"
        f"  Decisions/s: {rate:.2f}\n"
        f"  Latency: p50={p50:.1f} ms, p95={p95:.1f} ms, p99={p99:.1f} ms\n"
        f"  Total time: {total_elapsed:.2f} s\n"
    )
    print(summary)

    try:
        os.makedirs(os.path.dirname(args.output) or ".", exist_ok=True)
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(summary)
        print(f"Wrote {args.output}")
    except OSError:
        pass

    return 0


if __name__ == "__main__":
    sys.exit(main())
