"""
Posterior draws of vote shares for a single survey.

Each draw is one simulated "parallel election": a vector of vote shares
sampled from a Dirichlet posterior whose concentration is given by the
number of respondents backing each party.
"""
from typing import Optional, Union

import numpy as np
import pandas as pd

from coalition_odds.model.errors import ValidationError
from coalition_odds.settings import NSIM
from coalition_odds.utils.logging import get_logger

logger = get_logger(__name__)

SeedLike = Union[None, int, np.random.SeedSequence, np.random.Generator]


def make_rng(seed: SeedLike = None) -> np.random.Generator:
    """Build the random stream shared by the sampler and the seat tie-break."""
    if isinstance(seed, np.random.Generator):
        return seed
    return np.random.default_rng(seed)


def prepare_survey(survey: pd.DataFrame) -> pd.DataFrame:
    """
    Validate a survey and make sure it carries a ``votes`` column.

    Args:
        survey: One row per party with ``party`` and either ``votes`` or
            ``percent`` plus ``respondents``

    Returns:
        Copy of the survey with a float ``votes`` column
    """
    if not isinstance(survey, pd.DataFrame):
        raise ValidationError(f"survey must be a DataFrame, got {type(survey).__name__}")
    if survey.empty:
        raise ValidationError("survey must contain at least one party")
    if "party" not in survey.columns:
        raise ValidationError("survey is missing the 'party' column")
    if survey["party"].duplicated().any():
        dupes = survey.loc[survey["party"].duplicated(), "party"].tolist()
        raise ValidationError(f"survey lists parties more than once: {dupes}")

    df = survey.copy()
    if "votes" not in df.columns:
        if not {"percent", "respondents"}.issubset(df.columns):
            raise ValidationError(
                "survey needs a 'votes' column or both 'percent' and 'respondents'"
            )
        df["votes"] = df["percent"].astype(float) / 100.0 * df["respondents"].astype(float)

    votes = df["votes"].astype(float)
    if votes.isna().any() or not np.isfinite(votes.to_numpy()).all():
        raise ValidationError("survey votes must be finite numbers")
    if (votes < 0).any():
        raise ValidationError("survey votes must be non-negative")
    if votes.sum() <= 0:
        raise ValidationError("survey votes must not all be zero")
    df["votes"] = votes
    return df


def sample_size(survey: pd.DataFrame) -> float:
    """Number of respondents behind a survey (falls back to the vote total)."""
    if "respondents" in survey.columns:
        return float(survey["respondents"].max())
    return float(survey["votes"].sum())


def draw_from_posterior(
    survey: pd.DataFrame,
    nsim: int = NSIM,
    seed: SeedLike = None,
    correction: Optional[float] = None,
    rng: Optional[np.random.Generator] = None,
) -> pd.DataFrame:
    """
    Draw simulated vote shares from the posterior of a survey.

    Args:
        survey: Survey with ``party`` and ``votes`` (or ``percent`` and
            ``respondents``) columns
        nsim: Number of simulations
        seed: Seed for a fresh random stream, ignored when ``rng`` is given
        correction: Extra dispersion; the concentration is divided by
            ``1 + correction`` so each share's variance grows accordingly
        rng: Random stream to consume draws from

    Returns:
        DataFrame with one row per simulation and one column per party
    """
    survey = prepare_survey(survey)
    if int(nsim) != nsim or nsim < 1:
        raise ValidationError(f"nsim must be a positive integer, got {nsim}")
    if correction is not None and (not np.isfinite(correction) or correction < 0):
        raise ValidationError(f"correction must be a non-negative number, got {correction}")

    rng = rng if rng is not None else make_rng(seed)

    votes = survey["votes"].to_numpy(dtype=float)
    if correction is not None:
        votes = votes / (1.0 + correction)
    # uniform prior on the simplex
    alpha = votes + 1.0

    logger.debug("Drawing %d posterior samples for %d parties", nsim, len(alpha))
    draws = rng.dirichlet(alpha, size=int(nsim))

    df = pd.DataFrame(draws, columns=survey["party"].tolist())
    df.index.name = "sim"
    return df
