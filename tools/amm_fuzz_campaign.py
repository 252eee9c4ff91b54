#!/usr/bin/env python3
"""
Run a seeded invariant campaign against the in-memory reference pair.

Exit code 0 when every step and the campaign-end checks pass, 1 on an
invariant violation or a harness error (for example a crashing pair).
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from src.harness import CampaignConfig, HarnessConfig, run_campaign
from src.harness.config import DEFAULT_ACTORS
from src.integration import PairConfig, make_reference_pair


def main() -> int:
    ap = argparse.ArgumentParser(description="Constant-product pair invariant campaign")
    ap.add_argument("--steps", type=int, default=500, help="Driver calls per campaign")
    ap.add_argument("--seed", type=int, default=0, help="Random seed")
    ap.add_argument("--fee-bps", type=int, default=30)
    ap.add_argument("--minimum-liquidity", type=int, default=1000)
    ap.add_argument("--initial-balance", type=int, default=10**24, help="Per-actor starting balance of each token")
    ap.add_argument("--no-minimize", action="store_true", help="Report the raw counterexample only")
    ap.add_argument("--verbose", action="store_true")
    ap.add_argument("--json", action="store_true", help="Print the result as JSON")
    args = ap.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    pair_config = PairConfig(fee_bps=args.fee_bps, minimum_liquidity=args.minimum_liquidity)
    campaign_config = CampaignConfig(steps=args.steps, seed=args.seed, minimize=not args.no_minimize)

    def factory():
        return make_reference_pair(pair_config, DEFAULT_ACTORS, args.initial_balance)

    harness_config = HarnessConfig.for_pair(factory())
    result = run_campaign(factory, harness_config, campaign_config)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, sort_keys=True))
        return 0 if result.passed else 1

    status = "PASS" if result.passed else "FAIL"
    print(f"[amm-fuzz] {status} seed={args.seed} steps={result.steps}")
    for entry, counts in result.stats.to_dict().items():
        print(
            f"[amm-fuzz]   {entry:<16} calls={counts['calls']} ok={counts['successes']} "
            f"reverts={counts['reverts']} expected={counts['expected_reverts']}"
        )
    if not result.passed:
        shown = result.minimized or result.counterexample
        if result.internal_error is not None:
            print(f"[amm-fuzz] harness error: {result.internal_error}")
        print(f"[amm-fuzz] violations: {', '.join(shown.violations)}")
        print(f"[amm-fuzz] counterexample ({len(shown.trace)} steps):")
        for record in shown.trace:
            outcome = f"reverted {record.revert_reason}" if record.reverted else f"-> {record.result}"
            print(f"[amm-fuzz]   #{record.index} {record.entry} {record.clamped} {outcome}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
