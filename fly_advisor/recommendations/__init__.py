"""
Recommendation engine: scores catalog flies against normalized conditions
and returns a diverse, confidence-ranked shortlist.

Modules
-------
catalog     : filter_catalog() — validates, defaults and filters raw records.
tiers       : TierResult + the eight scoring tiers + DEFAULT_TIERS.
scorer      : FlyScore dataclass + HierarchicalScorer + score_fly().
calibration : calibrate_confidence() — raw score → bounded percentage.
selector    : select_diverse() — group-then-fill type/size/color diversity.
service     : RecommendationService — validation, quota gate, concurrent
              fetches, orchestration.
"""
