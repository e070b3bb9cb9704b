"""Tests for timestamp parsing and the metrics configuration."""

from datetime import datetime, timedelta, timezone

import pytest

from fourkeys import ConfigurationError, FourKeysMetricsService, MetricsConfig
from fourkeys.four_keys_metrics import to_api_date
from fourkeys.models import parse_timestamp


class TestParseTimestamp:
    """Test the accepted date and timestamp forms."""

    @pytest.mark.parametrize("value,expected", [
        ("2024-01-10", datetime(2024, 1, 10, tzinfo=timezone.utc)),
        ("2024-01-10T09:00:00Z", datetime(2024, 1, 10, 9, tzinfo=timezone.utc)),
        ("2024-01-10T09:00:00.250Z",
         datetime(2024, 1, 10, 9, 0, 0, 250000, tzinfo=timezone.utc)),
        ("2024-01-10T09:00Z", datetime(2024, 1, 10, 9, tzinfo=timezone.utc)),
        ("2024-01-10T09:00", datetime(2024, 1, 10, 9, tzinfo=timezone.utc)),
        ("2024-01-10 09:00:00", datetime(2024, 1, 10, 9, tzinfo=timezone.utc)),
        ("2024-01-10 09:00", datetime(2024, 1, 10, 9, tzinfo=timezone.utc)),
        ("2024-01-10 09:00:00+09:00",
         datetime(2024, 1, 10, 9, tzinfo=timezone(timedelta(hours=9)))),
    ])
    def test_accepted_forms(self, value, expected):
        assert parse_timestamp(value) == expected

    def test_naive_values_are_utc(self):
        assert parse_timestamp("2024-01-10T09:00").tzinfo == timezone.utc

    @pytest.mark.parametrize("value", [
        None, "", "last tuesday", "2024-13-01", "10/01/2024",
        1704067200, 1704067200.5, ["2024-01-10"], {"date": "2024-01-10"},
    ])
    def test_unrecognised_input_is_none(self, value):
        assert parse_timestamp(value) is None


class TestMetricsConfig:
    """Test date validation when building a configuration."""

    @pytest.mark.parametrize("until", [
        "2024-01-10",
        "2024-01-10T09:00:00Z",
        "2024-01-10T09:00Z",
        "2024-01-10T09:00",
        "2024-01-10 09:00:00",
    ])
    def test_until_forms_are_accepted(self, until, mock_backlog_api, sample_project):
        config = MetricsConfig(since="2024-01-01", until=until)

        assert config.until == until
        assert to_api_date(config.until) == "2024-01-10"
        service = FourKeysMetricsService(mock_backlog_api, sample_project)
        assert service.calculate_period_in_days(config.since, config.until) == 10

    @pytest.mark.parametrize("since", ["last tuesday", "2024/01/01", 20240101])
    def test_invalid_since_raises(self, since):
        with pytest.raises(ConfigurationError, match="Invalid since date"):
            MetricsConfig(since=since, until="2024-01-10")

    def test_from_dict_coerces_identifier_sets(self):
        config = MetricsConfig.from_dict({
            "completionStatusIds": [4, 4, None],
            "changeTypeIds": 1,
            "bugCategoryIds": "",
            "since": "",
        })

        assert config.completion_status_ids == frozenset({4})
        assert config.change_type_ids == frozenset({1})
        assert config.bug_category_ids == frozenset()
        assert config.since is None
