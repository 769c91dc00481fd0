"""
Coalition probabilities from a majority table.

The probability of a coalition is the share of simulations in which it has
a majority. By default, simulations where a smaller alternative coalition
(a proper subset of its parties) already has a majority are not counted,
since the larger coalition is not needed there. The denominator is always
the full number of simulations.
"""
from typing import Sequence, Union

import pandas as pd

from coalition_odds.model.coalitions import Coalition, canonical_name, proper_subsets
from coalition_odds.model.errors import ValidationError
from coalition_odds.settings import COLLAPSE, HURDLE


def _check_majority_table(majority_df: pd.DataFrame) -> None:
    if not isinstance(majority_df, pd.DataFrame):
        raise ValidationError("majority table must be a DataFrame")
    if len(majority_df) == 0:
        raise ValidationError("majority table has no simulations")
    non_bool = [c for c in majority_df.columns if majority_df[c].dtype != bool]
    if non_bool:
        raise ValidationError(f"majority table columns must be boolean: {non_bool}")


def _coalition_name(coalition: Coalition, collapse: str = COLLAPSE) -> str:
    if isinstance(coalition, str):
        if not coalition:
            raise ValidationError("coalition name must not be empty")
        return coalition
    return canonical_name(coalition, collapse=collapse)


def filter_smaller_alternatives(
    majority_df: pd.DataFrame, coalition: str, collapse: str = COLLAPSE
) -> pd.DataFrame:
    """Drop simulations where any smaller alternative coalition in the table has a majority."""
    smaller = [
        name
        for name in proper_subsets(coalition, pattern=collapse, collapse=collapse)
        if name in majority_df.columns
    ]
    if not smaller:
        return majority_df
    return majority_df.loc[~majority_df[smaller].any(axis=1)]


def calculate_prob(
    majority_df: pd.DataFrame,
    coalition: Coalition,
    exclude_smaller: bool = True,
    collapse: str = COLLAPSE,
) -> float:
    """
    Probability (in percent) that a coalition has a majority.

    Args:
        majority_df: Boolean majority table, simulations in rows
        coalition: Coalition name (a column of ``majority_df``) or parties
        exclude_smaller: Skip simulations where a smaller alternative
            coalition already has a majority
        collapse: Separator of the coalition names

    Returns:
        Percentage in ``[0, 100]``
    """
    _check_majority_table(majority_df)
    name = _coalition_name(coalition, collapse=collapse)
    if name not in majority_df.columns:
        raise ValidationError(f"coalition {name!r} is not a column of the majority table")

    n_all = len(majority_df)
    if exclude_smaller:
        majority_df = filter_smaller_alternatives(majority_df, name, collapse=collapse)

    return 100.0 * float(majority_df[name].sum()) / n_all


def calculate_probs(
    majority_df: pd.DataFrame,
    coalitions: Sequence[Coalition],
    exclude_smaller: bool = True,
    collapse: str = COLLAPSE,
) -> pd.DataFrame:
    """
    Probabilities for several coalitions.

    Returns:
        Long DataFrame with columns ``coalition`` and ``probability``
    """
    _check_majority_table(majority_df)
    if not coalitions:
        raise ValidationError("at least one coalition is required")
    names = [_coalition_name(c, collapse=collapse) for c in coalitions]
    if len(set(names)) != len(names):
        raise ValidationError(f"coalitions must be unique: {names}")

    rows = [
        {
            "coalition": name,
            "probability": calculate_prob(
                majority_df, name, exclude_smaller=exclude_smaller, collapse=collapse
            ),
        }
        for name in names
    ]
    return pd.DataFrame(rows, columns=["coalition", "probability"])


def get_entry_probability(draws: pd.DataFrame, hurdle: Union[float, int] = HURDLE) -> pd.DataFrame:
    """
    Probability (in percent) that each party clears the hurdle.

    Args:
        draws: Posterior draws, one column per party
        hurdle: Minimum vote share needed to enter parliament

    Returns:
        Long DataFrame with columns ``party`` and ``probability``
    """
    if draws.empty:
        raise ValidationError("draws must contain at least one simulation")
    entry = (draws >= hurdle).mean(axis=0) * 100.0
    return pd.DataFrame({"party": entry.index.tolist(), "probability": entry.to_numpy()})
