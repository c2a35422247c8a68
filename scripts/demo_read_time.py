#!/usr/bin/env python3
"""Demo: sync the clock with a replica and read a call's status.

Prerequisites
─────────────
1. A replica reachable at ICAGENT_HOST (default https://icp-api.io), or a
   local replica, e.g. ICAGENT_HOST=http://localhost:4943

Usage:
    python scripts/demo_read_time.py [canister_id] [request_id_hex]
"""

from __future__ import annotations

import logging
import sys

from icagent import Ed25519KeyIdentity, HttpAgent
from icagent.agent import DEFAULT_TIME_CANISTER


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    canister_id = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_TIME_CANISTER
    identity = Ed25519KeyIdentity.generate()
    agent = HttpAgent.from_env(identity=identity)

    print(f"host             = {agent.host.origin}")
    print(f"principal        = {agent.get_principal()}")
    print(f"canister_id      = {canister_id}")

    synced = agent.sync_time(canister_id)
    print(f"clock synced     = {synced}")
    print(f"clock offset     = {agent.clock.offset_ms} ms")

    if len(sys.argv) > 2:
        request_id = bytes.fromhex(sys.argv[2])
        status = agent.request_status(canister_id, request_id)
        print(f"request status   = {status.status}")
        if status.reply is not None:
            print(f"reply            = {status.reply.hex()}")
        if status.reject_message is not None:
            print(f"rejected ({status.reject_code}) = {status.reject_message}")


if __name__ == "__main__":
    main()
