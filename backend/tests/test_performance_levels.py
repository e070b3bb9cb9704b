"""Tests for DORA tier classification."""

import pytest

from fourkeys.performance_levels import (
    classify_change_failure_rate,
    classify_deployment_frequency,
    classify_lead_time,
    classify_mttr,
    describe_level,
)


class TestDeploymentFrequency:
    """Higher is better; bounds are inclusive lower bounds."""

    @pytest.mark.parametrize("per_day,level", [
        (3.5, "elite"),
        (1.0, "elite"),
        (0.999, "high"),
        (0.2, "high"),
        (0.199, "medium"),
        (0.067, "medium"),
        (0.0669, "low"),
        (0, "low"),
    ])
    def test_boundaries(self, per_day, level):
        assert classify_deployment_frequency(per_day) == level


class TestLeadTime:
    @pytest.mark.parametrize("days,level", [
        (0, "elite"),
        (1, "elite"),
        (1.01, "high"),
        (7, "high"),
        (7.01, "medium"),
        (30, "medium"),
        (30.01, "low"),
    ])
    def test_boundaries(self, days, level):
        assert classify_lead_time(days) == level


class TestMTTR:
    @pytest.mark.parametrize("hours,level", [
        (0.5, "elite"),
        (1, "elite"),
        (1.5, "high"),
        (24, "high"),
        (24.1, "medium"),
        (168, "medium"),
        (168.1, "low"),
    ])
    def test_boundaries(self, hours, level):
        assert classify_mttr(hours) == level


class TestChangeFailureRate:
    @pytest.mark.parametrize("percentage,level", [
        (0, "elite"),
        (5, "elite"),
        (5.01, "high"),
        (10, "high"),
        (10.01, "medium"),
        (15, "medium"),
        (15.01, "low"),
        (100, "low"),
    ])
    def test_boundaries(self, percentage, level):
        assert classify_change_failure_rate(percentage) == level


class TestDescribeLevel:
    def test_known_metric_and_level(self):
        assert describe_level("leadTime", "elite") == "Less than one day"
        assert describe_level("mttr", "low") == "More than one week"

    def test_unknown_metric_or_level(self):
        assert describe_level("velocity", "elite") == "Performance level not available"
        assert describe_level("leadTime", "legendary") == "Performance level not available"
