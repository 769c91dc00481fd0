from unittest.mock import MagicMock

import numpy as np
import pandas as pd
import pytest

from coalition_odds.model.errors import ValidationError
from coalition_odds.model.posterior import (
    draw_from_posterior,
    make_rng,
    prepare_survey,
    sample_size,
)


def make_survey():
    return pd.DataFrame({
        "party": ["cdu", "spd", "greens", "fdp", "left", "others"],
        "percent": [36.0, 22.0, 8.0, 10.5, 9.0, 14.5],
        "respondents": [2000] * 6,
    })


class TestPrepareSurvey:
    """Test survey validation."""

    def test_votes_from_percent(self):
        """Test that votes are derived from percentages and respondents."""
        result = prepare_survey(make_survey())

        assert result.loc[0, "votes"] == pytest.approx(720.0)
        assert result["votes"].sum() == pytest.approx(2000.0)

    def test_existing_votes_kept(self):
        survey = pd.DataFrame({"party": ["a", "b"], "votes": [30, 70]})

        result = prepare_survey(survey)

        assert result["votes"].tolist() == [30.0, 70.0]
        assert sample_size(result) == 100.0

    def test_sample_size_from_respondents(self):
        assert sample_size(prepare_survey(make_survey())) == 2000.0

    def test_does_not_mutate_input(self):
        survey = make_survey()

        prepare_survey(survey)

        assert "votes" not in survey.columns

    @pytest.mark.parametrize(
        "survey",
        [
            pd.DataFrame(columns=["party", "votes"]),
            pd.DataFrame({"party": ["a", "b"], "votes": [10, -1]}),
            pd.DataFrame({"party": ["a", "b"], "votes": [0, 0]}),
            pd.DataFrame({"party": ["a", "b"], "votes": [10, np.nan]}),
            pd.DataFrame({"party": ["a", "a"], "votes": [10, 20]}),
            pd.DataFrame({"party": ["a", "b"], "percent": [40, 60]}),
            pd.DataFrame({"votes": [10, 20]}),
        ],
    )
    def test_invalid_surveys(self, survey):
        with pytest.raises(ValidationError):
            prepare_survey(survey)

    def test_not_a_dataframe(self):
        with pytest.raises(ValidationError):
            prepare_survey([("a", 10)])


class TestDrawFromPosterior:
    """Test the Dirichlet posterior sampler."""

    def test_basic_draw(self):
        """Test shape and basic validity of the draws."""
        draws = draw_from_posterior(make_survey(), nsim=500, seed=42)

        assert draws.shape == (500, 6)
        assert draws.columns.tolist() == ["cdu", "spd", "greens", "fdp", "left", "others"]
        assert (draws.to_numpy() >= 0).all()
        np.testing.assert_allclose(draws.sum(axis=1), 1.0)

    def test_deterministic_with_seed(self):
        """Test that same seed produces same results."""
        draws1 = draw_from_posterior(make_survey(), nsim=200, seed=123, correction=0.5)
        draws2 = draw_from_posterior(make_survey(), nsim=200, seed=123, correction=0.5)

        pd.testing.assert_frame_equal(draws1, draws2)

    def test_different_seeds_differ(self):
        draws1 = draw_from_posterior(make_survey(), nsim=50, seed=1)
        draws2 = draw_from_posterior(make_survey(), nsim=50, seed=2)

        assert not np.array_equal(draws1.to_numpy(), draws2.to_numpy())

    def test_injected_rng_takes_precedence(self):
        """Test that an explicit stream is consumed instead of the seed."""
        draws1 = draw_from_posterior(make_survey(), nsim=20, seed=1, rng=make_rng(7))
        draws2 = draw_from_posterior(make_survey(), nsim=20, seed=7)

        pd.testing.assert_frame_equal(draws1, draws2)

    def test_generator_as_seed(self):
        """Test that a Generator passed as seed is used as the stream itself."""
        rng = np.random.default_rng(4)

        assert make_rng(rng) is rng

        draws1 = draw_from_posterior(make_survey(), nsim=20, seed=np.random.default_rng(4))
        draws2 = draw_from_posterior(make_survey(), nsim=20, seed=4)

        pd.testing.assert_frame_equal(draws1, draws2)

    def test_mean_matches_survey(self):
        """Test that draws are centered on the observed shares."""
        draws = draw_from_posterior(make_survey(), nsim=20000, seed=3)

        assert draws["cdu"].mean() == pytest.approx(0.36, abs=0.005)
        assert draws["greens"].mean() == pytest.approx(0.08, abs=0.005)

    def test_correction_inflates_variance(self):
        """Test that the correction widens the posterior."""
        plain = draw_from_posterior(make_survey(), nsim=20000, seed=11)
        corrected = draw_from_posterior(make_survey(), nsim=20000, seed=11, correction=3.0)

        assert corrected["cdu"].std() > 1.5 * plain["cdu"].std()
        assert corrected["cdu"].mean() == pytest.approx(plain["cdu"].mean(), abs=0.01)

    def test_single_party(self):
        draws = draw_from_posterior(pd.DataFrame({"party": ["a"], "votes": [10]}), nsim=5, seed=0)

        np.testing.assert_allclose(draws["a"], 1.0)

    def test_validation_before_sampling(self):
        """Test that bad input fails without consuming random draws."""
        rng = MagicMock()

        with pytest.raises(ValidationError):
            draw_from_posterior(make_survey(), nsim=0, rng=rng)
        with pytest.raises(ValidationError):
            draw_from_posterior(make_survey(), nsim=10, correction=-0.1, rng=rng)
        with pytest.raises(ValidationError):
            draw_from_posterior(pd.DataFrame(columns=["party", "votes"]), nsim=10, rng=rng)

        rng.dirichlet.assert_not_called()
