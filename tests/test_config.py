"""
Back Office Reporting - Configuration Tests
"""

from typing import get_args

import pytest
from pydantic import ValidationError

from backoffice.config import Settings
from backoffice.services.calendar_service import MONTH_LABELS


class TestReportingSettings:
    """Test validation of the reporting settings."""

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.report_timezone == "Asia/Bangkok"
        assert settings.month_locale == "id"

    def test_english_month_locale(self):
        assert Settings(_env_file=None, month_locale="en").month_locale == "en"

    def test_unknown_month_locale_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            Settings(_env_file=None, month_locale="fr")

        assert exc_info.value.errors()[0]["loc"] == ("month_locale",)

    def test_unknown_time_zone_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            Settings(_env_file=None, report_timezone="Mars/Olympus")

        error = exc_info.value.errors()[0]
        assert error["loc"] == ("report_timezone",)
        assert "Mars/Olympus" in error["msg"]

    def test_accepted_locales_match_label_tables(self):
        assert set(get_args(Settings.model_fields["month_locale"].annotation)) == set(MONTH_LABELS)
