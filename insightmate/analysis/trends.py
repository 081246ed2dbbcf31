from typing import Literal, Mapping, Sequence

Trend = Literal["increasing", "decreasing", "stable"]
ScoreTrend = Literal["improving", "declining", "stable"]


def half_split_trend(first: int, second: int) -> Trend:
    """Compare two counts with a +/-20% band; the band edges count as stable."""
    # second > 1.2 * first and second < 0.8 * first, kept in integers
    if second * 5 > first * 6:
        return "increasing"
    if second * 5 < first * 4:
        return "decreasing"
    return "stable"


def category_trend(
    category: str,
    timeline: Mapping[str, Mapping[str, int]],
    dates: Sequence[str],
) -> Trend:
    """Trend of one category across the first and second half of ``dates``."""
    if len(dates) < 2:
        return "stable"

    ordered = sorted(dates)
    mid = len(ordered) // 2
    first = sum(timeline.get(day, {}).get(category, 0) for day in ordered[:mid])
    second = sum(timeline.get(day, {}).get(category, 0) for day in ordered[mid:])
    return half_split_trend(first, second)


def score_trend(first_avg: float, second_avg: float) -> ScoreTrend:
    diff = second_avg - first_avg
    if diff > 0.1:
        return "improving"
    if diff < -0.1:
        return "declining"
    return "stable"
