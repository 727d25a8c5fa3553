"""
Leaderboard and pick popularity aggregation

Pure functions over already-fetched pool data. Nothing here touches the
database or the request, so the same input always yields the same output.

Inputs are plain dictionaries in the API's camelCase shape:
    participant: {"id", "name", "totalPoints", ...}
    prop:        {"id", "questionText", "options", "correctOptionIndex", "category", ...}
    pick:        {"propId", "selectedOptionIndex", ...}
"""

import math


def _percent(count, total):
    """Whole-number percentage, halves rounded up"""
    if not total:
        return 0
    return int(math.floor(count * 100 / total + 0.5))


def rank_participants(participants):
    """
    Rank participants by total points (descending), then name (ascending).

    Ranks are 1-based positions after sorting, so tied players get
    consecutive ranks in name order.
    """
    ordered = sorted(
        participants, key=lambda p: (-(p.get("totalPoints") or 0), p.get("name") or "")
    )
    return [dict(participant, rank=index + 1) for index, participant in enumerate(ordered)]


def has_resolved_props(props):
    return any(prop.get("correctOptionIndex") is not None for prop in props)


def compute_prop_pick_stats(option_count, selected_indices, correct_option_index=None):
    """
    Pick popularity for a single prop.

    Args:
        option_count: number of options on the prop
        selected_indices: selected option index of every pick on the prop
        correct_option_index: resolved answer, or None

    Returns:
        dict with totalPicks, optionCounts, mostPopularIndex,
        mostPopularPercent and correctCount (None while unresolved)
    """
    counts = [0] * option_count
    for index in selected_indices:
        if 0 <= index < option_count:
            counts[index] += 1
    total = sum(counts)

    most_popular_index = None
    if total:
        # Ties go to the lowest index
        most_popular_index = 0
        for index, count in enumerate(counts):
            if count > counts[most_popular_index]:
                most_popular_index = index

    correct_count = None
    if correct_option_index is not None:
        correct_count = (
            counts[correct_option_index] if 0 <= correct_option_index < option_count else 0
        )

    return {
        "totalPicks": total,
        "optionCounts": counts,
        "mostPopularIndex": most_popular_index,
        "mostPopularPercent": (
            _percent(counts[most_popular_index], total) if total else 0
        ),
        "correctCount": correct_count,
    }


def compute_pool_pick_summary(per_prop_stats):
    """
    Pool-wide highlights from per-prop stats.

    mostAgreed is the prop whose most popular option drew the largest share,
    mostDivisive the smallest share, and biggestUpset the resolved prop where
    the crowd favourite lost, preferring the most confident crowd. Earlier
    props win ties. All three are None when nobody has picked anything.
    """
    most_agreed = None
    most_divisive = None
    biggest_upset = None

    for entry in per_prop_stats:
        stats = entry["stats"]
        if not stats["totalPicks"]:
            continue

        percent = stats["mostPopularPercent"]
        if most_agreed is None or percent > most_agreed["stats"]["mostPopularPercent"]:
            most_agreed = entry
        if most_divisive is None or percent < most_divisive["stats"]["mostPopularPercent"]:
            most_divisive = entry

        correct = entry["correctOptionIndex"]
        if correct is not None and stats["mostPopularIndex"] != correct:
            if (
                biggest_upset is None
                or percent > biggest_upset["stats"]["mostPopularPercent"]
            ):
                biggest_upset = entry

    summary = {"mostAgreed": None, "mostDivisive": None, "biggestUpset": None}

    if most_agreed is not None:
        stats = most_agreed["stats"]
        summary["mostAgreed"] = {
            "propId": most_agreed["propId"],
            "questionText": most_agreed["questionText"],
            "optionText": most_agreed["options"][stats["mostPopularIndex"]],
            "percent": stats["mostPopularPercent"],
        }
    if most_divisive is not None:
        summary["mostDivisive"] = {
            "propId": most_divisive["propId"],
            "questionText": most_divisive["questionText"],
            "percent": most_divisive["stats"]["mostPopularPercent"],
        }
    if biggest_upset is not None:
        stats = biggest_upset["stats"]
        options = biggest_upset["options"]
        correct = biggest_upset["correctOptionIndex"]
        summary["biggestUpset"] = {
            "propId": biggest_upset["propId"],
            "questionText": biggest_upset["questionText"],
            "popularOption": options[stats["mostPopularIndex"]],
            "popularPercent": stats["mostPopularPercent"],
            "correctOption": options[correct] if 0 <= correct < len(options) else None,
        }

    return summary


def build_leaderboard(participants, props, picks):
    """Combine ranking, per-prop stats and the pool summary"""
    selections = {}
    for pick in picks:
        selections.setdefault(pick["propId"], []).append(pick["selectedOptionIndex"])

    per_prop_stats = []
    for prop in props:
        options = list(prop.get("options") or [])
        per_prop_stats.append(
            {
                "propId": prop["id"],
                "questionText": prop.get("questionText"),
                "options": options,
                "correctOptionIndex": prop.get("correctOptionIndex"),
                "category": prop.get("category"),
                "stats": compute_prop_pick_stats(
                    len(options),
                    selections.get(prop["id"], []),
                    prop.get("correctOptionIndex"),
                ),
            }
        )

    return {
        "leaderboard": rank_participants(participants),
        "hasResolvedProps": has_resolved_props(props),
        "perPropStats": per_prop_stats,
        "summary": compute_pool_pick_summary(per_prop_stats),
    }
