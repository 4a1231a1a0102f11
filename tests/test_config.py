"""Tests for Settings configuration model."""

from pathlib import Path

import pytest

from taskflow.config import Settings


class TestUseDevMail:
    def test_no_api_key_means_dev_mail(self):
        s = Settings(resend_api_key="")
        assert s.use_dev_mail() is True

    def test_whitespace_api_key_means_dev_mail(self):
        s = Settings(resend_api_key="   ")
        assert s.use_dev_mail() is True

    def test_api_key_enables_resend(self):
        s = Settings(resend_api_key="re_123")
        assert s.use_dev_mail() is False

    def test_dev_mail_flag_wins_over_key(self):
        s = Settings(resend_api_key="re_123", dev_mail=True)
        assert s.use_dev_mail() is True


class TestDefaults:
    def test_default_database_path(self):
        s = Settings()
        assert s.database_path == Path("data/taskflow.db")

    def test_default_scheduler_interval(self):
        s = Settings()
        assert s.scheduler_interval_seconds == 300

    def test_default_timezone(self):
        s = Settings()
        assert s.default_timezone == "America/Los_Angeles"

    def test_turso_disabled_by_default(self):
        s = Settings()
        assert s.turso_database_url == ""

    def test_cron_secret_empty_by_default(self):
        s = Settings()
        assert s.cron_secret == ""


class TestEnvIsolation:
    def test_env_vars_ignored_under_pytest(self, monkeypatch):
        monkeypatch.setenv("CRON_SECRET", "from-env")
        s = Settings()
        assert s.cron_secret == ""

    def test_unknown_field_rejected(self):
        with pytest.raises(ValueError, match="extra_forbidden"):
            Settings(not_a_setting="x")
