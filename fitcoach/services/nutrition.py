from decimal import Decimal, ROUND_HALF_UP

NUTRIENTS = ("calories", "protein", "carbs", "fat", "fiber")


def _round_half_up(value, places):
    quantum = Decimal(1).scaleb(-places)
    return Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)


def _item_value(item, nutrient):
    if isinstance(item, dict):
        value = item.get(nutrient)
    else:
        value = getattr(item, nutrient, None)
    return value or 0


def calculate_totals(items):
    """
    Sum the macros of ``items`` (dicts or objects). Calories are rounded to
    an integer, the other nutrients to one decimal place, both half-up.
    """
    sums = {nutrient: Decimal(0) for nutrient in NUTRIENTS}
    for item in items or []:
        for nutrient in NUTRIENTS:
            sums[nutrient] += Decimal(str(_item_value(item, nutrient)))

    totals = {"calories": int(_round_half_up(sums["calories"], 0))}
    for nutrient in NUTRIENTS[1:]:
        totals[nutrient] = float(_round_half_up(sums[nutrient], 1))
    return totals
