from typing import Sequence

import numpy as np
import pandas as pd

from coalition_odds.model.coalitions import paste_coalitions, validate_coalition
from coalition_odds.model.errors import ValidationError
from coalition_odds.model.results import SimulationResult
from coalition_odds.settings import COLLAPSE, DEFAULT_COALITIONS, SEATS_MAJORITY
from coalition_odds.utils.logging import get_logger

logger = get_logger(__name__)


def has_majority(
    result: SimulationResult,
    coalition: Sequence[str],
    seats_majority: int = SEATS_MAJORITY,
) -> np.ndarray:
    """
    Whether the coalition reaches ``seats_majority`` seats in each simulation.

    Returns:
        Boolean vector with one entry per simulation
    """
    parties = validate_coalition(coalition)
    missing = [p for p in parties if p not in result.parties]
    if missing:
        logger.warning("Parties %s have no seat allocation, counting them as 0 seats", missing)
    return result.coalition_seats(parties) >= seats_majority


def have_majority(
    result: SimulationResult,
    coalitions: Sequence[Sequence[str]] = DEFAULT_COALITIONS,
    seats_majority: int = SEATS_MAJORITY,
    collapse: str = COLLAPSE,
) -> pd.DataFrame:
    """
    Majority table for a catalogue of coalitions.

    Args:
        result: Seat allocations of all simulations
        coalitions: Coalitions as sequences of party ids
        seats_majority: Seats needed for a majority
        collapse: Separator for the canonical column names

    Returns:
        Boolean DataFrame, one row per simulation and one column per coalition
    """
    if result.nsim < 1:
        raise ValidationError("seat allocations must cover at least one simulation")
    if not np.isfinite(seats_majority):
        raise ValidationError(f"seats_majority must be finite, got {seats_majority}")

    names = paste_coalitions(coalitions, collapse=collapse)
    columns = {
        name: has_majority(result, sorted(coalition), seats_majority=seats_majority)
        for name, coalition in zip(names, coalitions)
    }
    majority_df = pd.DataFrame(columns, columns=names)
    majority_df.index.name = "sim"
    return majority_df
