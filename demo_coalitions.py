#!/usr/bin/env python3
"""
Demo script for the coalition probability pipeline.

Loads the sample surveys, keeps the latest survey of each pollster and
prints the probability of each default coalition holding a majority.
"""

from coalition_odds.data_adapters.surveys_fixture import get_latest, load_survey_table
from coalition_odds.model.monte_carlo import get_probabilities
from coalition_odds.model.posterior import draw_from_posterior
from coalition_odds.model.probability import get_entry_probability
from coalition_odds.settings import DEFAULT_COALITIONS, HURDLE


def demo_coalition_odds(nsim=2000, seed=42):
    """
    Print coalition probabilities for the latest surveys.

    Args:
        nsim: Simulations per survey (kept small for a quick demo)
        seed: Master seed so the demo is reproducible
    """
    surveys = get_latest(load_survey_table())
    print(f"🔮 Coalition odds for {len(surveys)} surveys ({nsim} simulations each)")
    print("=" * 60)

    probs = get_probabilities(surveys, coalitions=DEFAULT_COALITIONS, nsim=nsim, seed=seed)
    coalition_columns = [c for c in probs.columns if c not in surveys.columns]

    for _, row in probs.iterrows():
        print(f"\n📊 {row['pollster']} ({row['date']:%Y-%m-%d}, n={row['respondents']})")
        print("-" * 40)
        for coalition in coalition_columns:
            print(f"{coalition:>18}: {row[coalition]:>6.1f}%")


def demo_entry_probabilities(nsim=2000, seed=42):
    """Print the chance of each party clearing the hurdle in the latest survey."""
    surveys = get_latest(load_survey_table())
    latest = surveys.sort_values("date").iloc[-1]
    draws = draw_from_posterior(latest["survey"], nsim=nsim, seed=seed)

    print(f"\n🚪 Entry probabilities ({latest['pollster']}, hurdle {HURDLE:.0%})")
    print("-" * 40)
    for _, row in get_entry_probability(draws).iterrows():
        print(f"{row['party']:>8}: {row['probability']:>6.1f}%")


if __name__ == "__main__":
    demo_coalition_odds()
    demo_entry_probabilities()
