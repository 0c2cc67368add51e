"""
Sample-size and significance gates shared by the judgment-memory readers.

Every threshold that decides whether aggregated decision data is strong enough
to surface a recommendation lives here, so the gating policy can be audited in
one place.
"""

# DriftPlanner: "defaults" adjustments
DEFAULTS_MIN_DECISIONS = 3
DEFAULTS_MIN_HIRE_RATE = 0.5
DEFAULTS_APPLY_MIN_DECISIONS = 20
DEFAULTS_APPLY_MIN_HIRE_RATE = 0.55

# DriftPlanner: "tradeoffs" adjustments
TRADEOFFS_MIN_OVERRIDE_LIFT = 0.05
TRADEOFFS_MIN_OVERRIDES = 1
TRADEOFFS_APPLY_MIN_OVERRIDES = 8

# DriftPlanner: "confidence" adjustments
CONFIDENCE_MIN_BAND_RATE = 0.55
CONFIDENCE_MIN_BAND_TOTAL = 3
CONFIDENCE_APPLY_MIN_BAND_TOTAL = 10

# CulturalCueBuilder
CUE_MIN_SAMPLE_SIZE = 8
CUE_MAX_COUNT = 2
CUE_MIN_OVERRIDE_LIFT = 0.01
CUE_MIN_CONFIDENCE_ADJUSTMENT_SHARE = 0.1

# ClientRelativeBenchmarking size cohorts (lower bounds)
COHORT_GROWTH_MIN_SAMPLE = 75
COHORT_ENTERPRISE_MIN_SAMPLE = 200
