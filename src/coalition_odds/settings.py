import os

from dotenv import load_dotenv

load_dotenv()

SURVEYS_CSV = os.getenv("SURVEYS_CSV", "data/raw/surveys_sample.csv")
NSIM = int(os.getenv("COALITION_NSIM", "10000"))
SEATS_TOTAL = int(os.getenv("SEATS_TOTAL", "598"))
SEATS_MAJORITY = int(os.getenv("SEATS_MAJORITY", "300"))
HURDLE = float(os.getenv("HURDLE", "0.05"))
COLLAPSE = os.getenv("COALITION_COLLAPSE", "_")
EXCLUDED_PARTIES = ("others",)
DEFAULT_COALITIONS = [
    ["cdu"],
    ["cdu", "fdp"],
    ["cdu", "fdp", "greens"],
    ["spd"],
    ["spd", "left"],
    ["spd", "left", "greens"],
]
