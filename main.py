"""
MUN Portfolio Allotment

Replays the registration window under several allotment scenarios and
compares the outcomes.
"""

import argparse
import json
import logging
from typing import Any, Dict, List

from allotment.catalog import DEFAULT_CATALOG
from allotment.config_builder import ConfigBuilder
from allotment.entities import PortfolioKey
from allotment.inventory import inventory_from_catalog, iter_matrix
from allotment.simulation import AllotmentRun, run_monte_carlo
from allotment.registration import RegistrationStatus


def load_registrations(filename: str = "data/registrations.json") -> List[Dict[str, Any]]:
    """
    Load raw registration records from a JSON file.
    """
    try:
        with open(filename, "r") as f:
            records = json.load(f)
        print(f"Loaded {len(records)} registrations.")
        return records
    except FileNotFoundError:
        print(f"Warning: {filename} not found.")
        return []


def load_seats(filename: str = "data/portfolios.json") -> List[PortfolioKey]:
    """Seats from the portfolio matrix, or from the tier catalog when there is none."""
    try:
        with open(filename, "r") as f:
            matrix = json.load(f)
        return [key for key, _ in iter_matrix(matrix)]
    except FileNotFoundError:
        print(f"Warning: {filename} not found. Using the catalog portfolios.")
        return inventory_from_catalog(DEFAULT_CATALOG)


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--registrations", default="data/registrations.json")
    parser.add_argument("--portfolios", default="data/portfolios.json")
    parser.add_argument("--runs", type=int, default=200, help="shuffled arrival orders per scenario")
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    records = load_registrations(args.registrations)
    if not records:
        print("No registrations loaded. Exiting.")
        return
    seats = load_seats(args.portfolios)
    print(f"Inventory: {len(seats)} portfolios")

    # =========================================================================
    # SCENARIO DEFINITIONS
    # =========================================================================

    base_builder = ConfigBuilder()
    scenarios = [
        ("Best score (25% cap)", base_builder.build()),
        ("First eligible (25% cap)", base_builder.with_strategy("first_eligible").build()),
        ("Best score (no cap)", base_builder.with_caps(allotted=1.0).build()),
        ("First eligible (no cap)", base_builder.with_strategy("first_eligible").with_caps(allotted=1.0).build()),
        ("Flat multipliers (no cap)", base_builder.with_caps(allotted=1.0).with_committee_multipliers(
            {c: 1.0 for c in DEFAULT_CATALOG.committees()}).build()),
    ]

    # =========================================================================
    # ARRIVAL ORDER AS SUBMITTED
    # =========================================================================

    print("\n" + "=" * 90)
    print("Registration window in submission order (Best score, 25% cap)")
    print("=" * 90)
    print(f"{'#':<4} | {'Delegate':<25} | {'Outcome':<32} | {'Portfolio':<20}")
    print("-" * 90)

    outcomes = AllotmentRun(seats, scenarios[0][1]).run(records)
    for i, (record, outcome) in enumerate(zip(records, outcomes), 1):
        name = record.get("name") or record.get("fullName", "?")
        if outcome is None:
            print(f"{i:<4} | {name:<25} | {'rejected':<32} |")
            continue
        portfolio = ""
        if outcome.status == RegistrationStatus.ALLOTTED:
            portfolio = str(outcome.allocation.key)
        print(f"{i:<4} | {name:<25} | {outcome.status.value:<32} | {portfolio:<20}")

    # =========================================================================
    # RUN SIMULATIONS
    # =========================================================================

    print("\n" + "=" * 90)
    print(f"Shuffled arrival order ({args.runs} runs each)")
    print("=" * 90)
    print(f"{'Scenario':<30} | {'Allotted':<9} | {'Waitlist':<9} | {'No seat':<9} | {'Score':<7} | {'1st pref':<8}")
    print("-" * 90)

    for name, cfg in scenarios:
        stats = run_monte_carlo(records, seats, cfg, num_runs=args.runs, seed=args.seed)
        if stats.total_runs == 0:
            print(f"{name:<30} | Error: nothing simulated.")
            continue
        print(
            f"{name:<30} | {stats.mean_allotted:<9.1f} | {stats.mean_waitlisted:<9.1f} | "
            f"{stats.mean_unallocated:<9.1f} | {stats.mean_score:<7.1f} | {stats.first_choice_share*100:.1f}%"
        )

    print("-" * 90)


if __name__ == "__main__":
    main()
