from __future__ import annotations

from halltider.config import Settings
from halltider.directions import classify
from halltider.fetchers.resrobot import fetch_arrivals, parse_arrivals
from halltider.models import ClassifiedResult


def load_arrivals(settings: Settings) -> ClassifiedResult:
    """Fetch, parse and classify the arrival board once.

    Shared by the console run and every ``/halltider`` request; each call
    performs its own upstream request.
    """

    raw = fetch_arrivals(
        settings.api_key,
        settings.site_id,
        settings.max_journeys,
        dump_path=settings.dump_path,
    )
    return classify(parse_arrivals(raw))
