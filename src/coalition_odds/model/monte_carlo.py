from typing import Optional, Sequence, Union

import numpy as np
import pandas as pd

from coalition_odds.model.coalitions import paste_coalitions
from coalition_odds.model.errors import HurdleError, ValidationError
from coalition_odds.model.majority import have_majority
from coalition_odds.model.posterior import (
    draw_from_posterior,
    make_rng,
    prepare_survey,
    sample_size,
)
from coalition_odds.model.probability import calculate_probs
from coalition_odds.model.results import SimulationResult
from coalition_odds.model.seats import (
    Apportion,
    apportion_seats,
    get_apportionment,
    sainte_lague,
)
from coalition_odds.settings import (
    COLLAPSE,
    DEFAULT_COALITIONS,
    EXCLUDED_PARTIES,
    HURDLE,
    NSIM,
    SEATS_MAJORITY,
    SEATS_TOTAL,
)
from coalition_odds.utils.logging import get_logger

logger = get_logger(__name__)


def get_seats(
    draws: pd.DataFrame,
    survey: pd.DataFrame,
    apportion: Union[str, Apportion] = sainte_lague,
    seats_total: int = SEATS_TOTAL,
    hurdle: float = HURDLE,
    exclude: Sequence[str] = EXCLUDED_PARTIES,
    rng: Optional[np.random.Generator] = None,
) -> SimulationResult:
    """
    Seat allocation for every posterior draw.

    Parties below ``hurdle`` or listed in ``exclude`` get no votes before
    apportionment and therefore no seats; the remaining shares are scaled
    to the survey's respondent count.

    Args:
        draws: Posterior draws, one row per simulation and one column per party
        survey: The survey the draws came from
        apportion: Apportionment function or its registered name
        seats_total: Seats in the legislature
        hurdle: Minimum vote share to be eligible for seats
        exclude: Party ids that never get seats (e.g. "others")
        rng: Random stream for tie-breaks

    Returns:
        SimulationResult with one row of seats per draw
    """
    apportion = get_apportionment(apportion)
    rng = rng if rng is not None else make_rng()
    parties = draws.columns.tolist()
    shares = draws.to_numpy(dtype=float)
    n = sample_size(prepare_survey(survey))

    eligible_mask = (shares >= hurdle) & ~np.isin(parties, list(exclude))[None, :]
    no_party = np.flatnonzero(~eligible_mask.any(axis=1))
    if no_party.size:
        raise HurdleError(
            f"No party reaches the {hurdle:.1%} hurdle in simulation {no_party[0]} "
            f"({no_party.size} of {shares.shape[0]} simulations affected)"
        )
    votes = np.where(eligible_mask, shares * n, 0.0)

    seats_matrix = np.zeros(shares.shape, dtype=int)
    for k in range(shares.shape[0]):
        seats_matrix[k, :] = apportion_seats(apportion, votes[k], seats_total, rng=rng)
    logger.debug("Allocated %d seats in %d simulations", seats_total, shares.shape[0])
    return SimulationResult(parties, seats_matrix)


def survey_table(surveys: Sequence[pd.DataFrame], **metadata) -> pd.DataFrame:
    """
    Build a survey table from per-party survey frames.

    Args:
        surveys: One DataFrame per survey
        **metadata: Columns describing each survey (pollster, date, ...)

    Returns:
        DataFrame with the metadata columns and a ``survey`` column
    """
    # filled one by one so pandas keeps each frame as a single object
    nested = np.empty(len(surveys), dtype=object)
    for i, survey in enumerate(surveys):
        nested[i] = survey
    return pd.DataFrame({**metadata, "survey": nested})


def check_hurdle(
    survey: pd.DataFrame, hurdle: float = HURDLE, exclude: Sequence[str] = EXCLUDED_PARTIES
) -> None:
    """Reject a survey in which no eligible party reaches the hurdle."""
    survey = prepare_survey(survey)
    shares = survey["votes"] / survey["votes"].sum()
    eligible = shares[~survey["party"].isin(list(exclude))]
    if not (eligible >= hurdle).any():
        raise ValidationError(
            f"No party in the survey reaches the {hurdle:.1%} hurdle, "
            f"so no seats could be allocated"
        )


def _survey_column(surveys: pd.DataFrame) -> pd.DataFrame:
    """Wrap a single survey into a one-row survey table."""
    if not isinstance(surveys, pd.DataFrame):
        raise ValidationError(f"surveys must be a DataFrame, got {type(surveys).__name__}")
    if "survey" in surveys.columns:
        return surveys.reset_index(drop=True)
    return survey_table([surveys])


def get_probabilities(
    surveys: pd.DataFrame,
    coalitions: Optional[Sequence[Sequence[str]]] = None,
    nsim: int = NSIM,
    apportion: Union[str, Apportion] = sainte_lague,
    seats_total: int = SEATS_TOTAL,
    seats_majority: int = SEATS_MAJORITY,
    hurdle: float = HURDLE,
    seed: Optional[int] = None,
    correction: Optional[float] = None,
    exclude_smaller: bool = True,
) -> pd.DataFrame:
    """
    Coalition majority probabilities for each survey.

    Args:
        surveys: Survey table with a ``survey`` column of per-party
            DataFrames, or a single survey DataFrame
        coalitions: Coalitions as sequences of party ids, defaults to
            ``DEFAULT_COALITIONS``
        nsim: Simulations per survey
        apportion: Apportionment function or its registered name
        seats_total: Seats in the legislature
        seats_majority: Seats needed for a majority
        hurdle: Minimum vote share to be eligible for seats
        seed: Master seed; every survey gets its own child stream
        correction: Extra dispersion passed to the posterior sampler
        exclude_smaller: Skip simulations where a smaller alternative
            coalition already has a majority

    Returns:
        Survey metadata plus one probability column (percent) per coalition
    """
    coalitions = DEFAULT_COALITIONS if coalitions is None else coalitions
    names = paste_coalitions(coalitions, collapse=COLLAPSE)
    apportion = get_apportionment(apportion)
    if int(nsim) != nsim or nsim < 1:
        raise ValidationError(f"nsim must be a positive integer, got {nsim}")
    if int(seats_total) != seats_total or seats_total < 1:
        raise ValidationError(f"seats_total must be a positive integer, got {seats_total}")
    if correction is not None and correction < 0:
        raise ValidationError(f"correction must be non-negative, got {correction}")

    table = _survey_column(surveys)
    if table.empty:
        raise ValidationError("no surveys to simulate")
    prepared = [prepare_survey(s) for s in table["survey"]]
    for survey in prepared:
        check_hurdle(survey, hurdle=hurdle)

    seed_seq = np.random.SeedSequence(seed)
    if seed is None:
        logger.info("No seed given, using entropy %d", seed_seq.entropy)
    streams = [np.random.default_rng(child) for child in seed_seq.spawn(len(prepared))]

    rows = []
    for i, (survey, rng) in enumerate(zip(prepared, streams)):
        logger.info("Simulating survey %d/%d with %d draws", i + 1, len(prepared), nsim)
        draws = draw_from_posterior(survey, nsim=nsim, correction=correction, rng=rng)
        seats = get_seats(
            draws, survey, apportion=apportion, seats_total=seats_total, hurdle=hurdle, rng=rng
        )
        majority_df = have_majority(
            seats, coalitions, seats_majority=seats_majority, collapse=COLLAPSE
        )
        probs = calculate_probs(majority_df, names, exclude_smaller=exclude_smaller)
        rows.append(probs.set_index("coalition")["probability"].reindex(names))

    probabilities = pd.DataFrame(rows, columns=names).reset_index(drop=True)
    metadata = table.drop(columns=["survey"])
    return pd.concat([metadata, probabilities], axis=1)
