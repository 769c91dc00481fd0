from typing import Optional

import pandas as pd

from coalition_odds.model.errors import ValidationError
from coalition_odds.model.monte_carlo import survey_table
from coalition_odds.settings import SURVEYS_CSV

SURVEY_KEYS = ["pollster", "date", "start", "end", "respondents"]


def load_survey_table(path: Optional[str] = None) -> pd.DataFrame:
    """
    Load surveys from a long CSV (one row per survey and party).

    Args:
        path: CSV with columns pollster, date, start, end, respondents,
            party, percent; defaults to ``SURVEYS_CSV``

    Returns:
        DataFrame with one row per survey, its metadata, and a ``survey``
        column holding the per-party votes
    """
    raw = pd.read_csv(path or SURVEYS_CSV)
    missing = set(SURVEY_KEYS + ["party", "percent"]) - set(raw.columns)
    if missing:
        raise ValidationError(f"survey file is missing columns: {sorted(missing)}")
    incomplete = raw[raw[SURVEY_KEYS + ["party", "percent"]].isna().any(axis=1)]
    if not incomplete.empty:
        raise ValidationError(
            f"survey file has rows with missing values at lines {(incomplete.index + 2).tolist()}"
        )

    for col in ["date", "start", "end"]:
        raw[col] = pd.to_datetime(raw[col])
    raw["votes"] = raw["percent"] / 100.0 * raw["respondents"]

    metadata = {key: [] for key in SURVEY_KEYS}
    surveys = []
    for keys, group in raw.groupby(SURVEY_KEYS, sort=False):
        for key, value in zip(SURVEY_KEYS, keys):
            metadata[key].append(value)
        surveys.append(group[["party", "percent", "votes", "respondents"]].reset_index(drop=True))
    return survey_table(surveys, **metadata)


def get_latest(surveys: pd.DataFrame) -> pd.DataFrame:
    """Most recent survey of each pollster."""
    return (
        surveys.sort_values("date")
        .groupby("pollster", sort=False)
        .tail(1)
        .sort_values("pollster")
        .reset_index(drop=True)
    )
