from pathlib import Path

import pandas as pd
import pytest

from coalition_odds.data_adapters.surveys_fixture import get_latest, load_survey_table
from coalition_odds.model.errors import ValidationError

SAMPLE_CSV = Path(__file__).resolve().parents[1] / "data" / "raw" / "surveys_sample.csv"


def write_surveys(path):
    pd.DataFrame({
        "pollster": ["forsa"] * 2 + ["forsa"] * 2 + ["emnid"] * 2,
        "date": ["2017-09-01"] * 2 + ["2017-09-08"] * 2 + ["2017-09-05"] * 2,
        "start": ["2017-08-28"] * 2 + ["2017-09-04"] * 2 + ["2017-09-01"] * 2,
        "end": ["2017-08-31"] * 2 + ["2017-09-07"] * 2 + ["2017-09-04"] * 2,
        "respondents": [1000] * 2 + [2000] * 2 + [1500] * 2,
        "party": ["cdu", "spd"] * 3,
        "percent": [60.0, 40.0, 55.0, 45.0, 50.0, 50.0],
    }).to_csv(path, index=False)


class TestLoadSurveyTable:
    """Test the survey CSV adapter."""

    def test_one_row_per_survey(self, tmp_path):
        csv = tmp_path / "surveys.csv"
        write_surveys(csv)

        result = load_survey_table(str(csv))

        assert len(result) == 3
        assert result.columns.tolist() == [
            "pollster", "date", "start", "end", "respondents", "survey"
        ]
        assert result["pollster"].tolist() == ["forsa", "forsa", "emnid"]

    def test_votes_derived(self, tmp_path):
        csv = tmp_path / "surveys.csv"
        write_surveys(csv)

        survey = load_survey_table(str(csv)).loc[0, "survey"]

        assert survey["party"].tolist() == ["cdu", "spd"]
        assert survey["votes"].tolist() == pytest.approx([600.0, 400.0])
        assert (survey["respondents"] == 1000).all()

    def test_missing_columns(self, tmp_path):
        csv = tmp_path / "bad.csv"
        pd.DataFrame({
            "pollster": ["forsa"], "date": ["2017-09-01"], "start": ["2017-08-28"],
            "end": ["2017-08-31"], "party": ["cdu"], "percent": [40.0],
        }).to_csv(csv, index=False)

        with pytest.raises(ValidationError):
            load_survey_table(str(csv))

    def test_missing_survey_keys(self, tmp_path):
        """Test that rows without survey keys are rejected instead of dropped."""
        csv = tmp_path / "surveys.csv"
        write_surveys(csv)
        raw = pd.read_csv(csv)
        raw.loc[[4, 5], "start"] = None
        raw.to_csv(csv, index=False)

        with pytest.raises(ValidationError, match=r"lines \[6, 7\]"):
            load_survey_table(str(csv))

    def test_sample_file(self):
        """Test that the bundled sample surveys are well formed."""
        result = load_survey_table(str(SAMPLE_CSV))

        assert len(result) == 2
        for survey in result["survey"]:
            assert abs(survey["percent"].sum() - 100.0) < 1.0
            assert (survey["votes"] >= 0).all()


class TestGetLatest:
    """Test selection of the latest survey per pollster."""

    def test_latest_per_pollster(self, tmp_path):
        csv = tmp_path / "surveys.csv"
        write_surveys(csv)

        result = get_latest(load_survey_table(str(csv)))

        assert result["pollster"].tolist() == ["emnid", "forsa"]
        assert result.loc[1, "date"] == pd.Timestamp("2017-09-08")
        assert result.loc[1, "respondents"] == 2000
