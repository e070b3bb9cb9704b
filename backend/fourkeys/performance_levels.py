"""DORA performance tier classification.

Each metric maps onto one of four ordered tiers: elite, high, medium, low.
Deployment frequency is "higher is better" and uses inclusive lower bounds;
the other three are "lower is better" and use inclusive upper bounds.
"""

ELITE = "elite"
HIGH = "high"
MEDIUM = "medium"
LOW = "low"

PERFORMANCE_LEVELS = (ELITE, HIGH, MEDIUM, LOW)

# (elite, high, medium) thresholds
DEPLOYMENT_FREQUENCY_THRESHOLDS = (1, 0.2, 0.067)  # deployments per day
LEAD_TIME_THRESHOLDS = (1, 7, 30)  # days
MTTR_THRESHOLDS = (1, 24, 168)  # hours
CHANGE_FAILURE_RATE_THRESHOLDS = (5, 10, 15)  # percent

LEVEL_DESCRIPTIONS = {
    "deploymentFrequency": {
        ELITE: "Multiple deployments per day",
        HIGH: "Between once per day and once per week",
        MEDIUM: "Between once per week and once per month",
        LOW: "Less than once per month",
    },
    "leadTime": {
        ELITE: "Less than one day",
        HIGH: "Between one day and one week",
        MEDIUM: "Between one week and one month",
        LOW: "More than one month",
    },
    "mttr": {
        ELITE: "Less than one hour",
        HIGH: "Less than one day",
        MEDIUM: "Less than one week",
        LOW: "More than one week",
    },
    "changeFailureRate": {
        ELITE: "0-5% of changes result in failures",
        HIGH: "5-10% of changes result in failures",
        MEDIUM: "10-15% of changes result in failures",
        LOW: "More than 15% of changes result in failures",
    },
}


def _at_least(value: float, thresholds: tuple) -> str:
    elite, high, medium = thresholds
    if value >= elite:
        return ELITE
    if value >= high:
        return HIGH
    if value >= medium:
        return MEDIUM
    return LOW


def _at_most(value: float, thresholds: tuple) -> str:
    elite, high, medium = thresholds
    if value <= elite:
        return ELITE
    if value <= high:
        return HIGH
    if value <= medium:
        return MEDIUM
    return LOW


def classify_deployment_frequency(deployments_per_day: float) -> str:
    """Classify deployments per day (>= 1 elite, >= 0.2 high, >= 0.067 medium)."""
    return _at_least(deployments_per_day, DEPLOYMENT_FREQUENCY_THRESHOLDS)


def classify_lead_time(days: float) -> str:
    """Classify lead time in days (<= 1 elite, <= 7 high, <= 30 medium)."""
    return _at_most(days, LEAD_TIME_THRESHOLDS)


def classify_mttr(hours: float) -> str:
    """Classify time to recovery in hours (<= 1 elite, <= 24 high, <= 168 medium)."""
    return _at_most(hours, MTTR_THRESHOLDS)


def classify_change_failure_rate(percentage: float) -> str:
    """Classify failure rate in percent (<= 5 elite, <= 10 high, <= 15 medium)."""
    return _at_most(percentage, CHANGE_FAILURE_RATE_THRESHOLDS)


def describe_level(metric: str, level: str) -> str:
    """Human readable meaning of a tier for the given metric key."""
    return LEVEL_DESCRIPTIONS.get(metric, {}).get(
        level, "Performance level not available"
    )
