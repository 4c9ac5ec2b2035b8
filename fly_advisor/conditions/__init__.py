"""
Condition handling: hatch calendar and normalization.

Modules
-------
hatch_calendar : HATCH_CALENDAR table + active_hatches() — which insects are
                 on the water for a date, water temperature and day-part.
normalizer     : normalize_conditions() — PartialFishingConditions →
                 FishingConditions with every scorer input filled in.
"""
