"""Tests for the arrival-order simulation."""

from allotment.entities import PortfolioKey
from allotment.registration import RegistrationStatus
from allotment.simulation import AllotmentRun, run_monte_carlo
from tests.factories import record

SEATS = [PortfolioKey("UNGA", None, "India"), PortfolioKey("UNGA", None, "Germany")]

RECORDS = [
    record("Only India", "a@x.org", experience="30+", best=5, preferences=[("UNGA", "India")]),
    record("India or Germany", "b@x.org", experience="30+", best=5,
           preferences=[("UNGA", "India"), ("UNGA", "Germany")]),
]


class TestAllotmentRun:
    def test_processes_in_given_order(self, uncapped_config):
        outcomes = AllotmentRun(SEATS, uncapped_config).run(RECORDS)

        assert outcomes[0].allocation.portfolio == "India"
        assert outcomes[1].allocation.portfolio == "Germany"

    def test_reverse_order_leaves_first_delegate_without_a_seat(self, uncapped_config):
        outcomes = AllotmentRun(SEATS, uncapped_config).run(list(reversed(RECORDS)))

        assert outcomes[0].allocation.portfolio == "India"
        assert outcomes[1].status == RegistrationStatus.NO_ELIGIBLE_PORTFOLIO

    def test_rejected_records_yield_none(self, uncapped_config):
        bad = record("Bad", "c@x.org", experience="lots", preferences=[("UNGA", "India")])

        outcomes = AllotmentRun(SEATS, uncapped_config).run([bad] + RECORDS)

        assert outcomes[0] is None
        assert outcomes[1].status == RegistrationStatus.ALLOTTED


class TestRunMonteCarlo:
    def test_flexible_delegate_is_always_seated(self, uncapped_config):
        stats = run_monte_carlo(RECORDS, SEATS, uncapped_config, num_runs=50, seed=7)

        assert stats.total_runs == 50
        assert stats.allot_probs[1] == 1.0
        assert 0.0 < stats.allot_probs.get(0, 0.0) < 1.0
        assert 1.0 < stats.mean_allotted < 2.0
        assert stats.mean_waitlisted == 0.0
        assert stats.tier_counts["tier1"] == 1.0

    def test_reproducible_with_seed(self, uncapped_config):
        a = run_monte_carlo(RECORDS, SEATS, uncapped_config, num_runs=20, seed=3)
        b = run_monte_carlo(RECORDS, SEATS, uncapped_config, num_runs=20, seed=3)
        assert a == b

    def test_empty_input(self):
        stats = run_monte_carlo([], SEATS, num_runs=10)
        assert stats.total_runs == 0
