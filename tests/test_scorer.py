"""Tests for allocation scores."""

from allotment.scorer import round_half_up, score_allocation
from tests.factories import make_delegate


class TestScoreAllocation:
    def test_tier2_unsc_first_preference(self):
        delegate = make_delegate(band="11-20", best=4)

        result = score_allocation("Japan", "UNSC", delegate, preference_rank=1)

        # round(75 * 1.5 * 1.0 + 70 * 0.5) = round(147.5)
        assert result.eligible is True
        assert result.tier == "tier2"
        assert result.score == 148
        assert result.reason is None

    def test_ineligible_scores_zero_with_reason(self):
        result = score_allocation("United States (P5)", "UNSC", make_delegate(band="0"), 1)

        assert result.eligible is False
        assert result.score == 0
        assert result.reason == "Requires 10+ MUNs and 5+ Best Delegates"

    def test_preference_rank_penalty(self, veteran):
        # veteran: 100 + 6*5 + 2*3 = 136 points -> +68 bonus
        scores = [score_allocation("India", "UNGA", veteran, rank).score for rank in (1, 2, 3)]
        assert scores == [168, 153, 138]

    def test_committee_multiplier(self, veteran):
        result = score_allocation("Harry Potter - Head Auror", "MOM", veteran, 1, subgroup="auror")
        assert result.score == 100 * 1.4 + 68

    def test_halves_round_up(self):
        # 112.5 + 72 * 0.5 = 148.5
        delegate = make_delegate(band="11-20", best=4, verbal=2)
        assert score_allocation("Japan", "UNSC", delegate, 1).score == 149

    def test_unlisted_committee_uses_neutral_multiplier(self):
        # 15 * 1.0 + 5 * 0.5 = 17.5
        result = score_allocation("Atlantis", "DISEC", make_delegate(band="1"), 1)
        assert result.score == 18

    def test_round_half_up(self):
        assert round_half_up(0.5) == 1
        assert round_half_up(2.5) == 3
        assert round_half_up(2.49) == 2
