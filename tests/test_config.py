from zoneinfo import ZoneInfo

from app.config import DashboardSettings


def test_defaults(monkeypatch):
    for name in (
        "FEEDBACK_PAGE_SIZE",
        "FEEDBACK_TREND_DAYS",
        "FEEDBACK_TOP_CONTRIBUTORS",
        "FEEDBACK_RECENCY_HOURS",
        "FEEDBACK_DEFAULT_RANGE_DAYS",
        "FEEDBACK_TIMEZONE",
        "FEEDBACK_INCREMENTAL_MERGE",
    ):
        monkeypatch.delenv(name, raising=False)

    settings = DashboardSettings.from_env()
    assert settings == DashboardSettings()
    assert settings.page_size == 5
    assert settings.timezone == ZoneInfo("UTC")


def test_overrides(monkeypatch):
    monkeypatch.setenv("FEEDBACK_PAGE_SIZE", "20")
    monkeypatch.setenv("FEEDBACK_TIMEZONE", "Europe/Berlin")
    monkeypatch.setenv("FEEDBACK_INCREMENTAL_MERGE", "TRUE")

    settings = DashboardSettings.from_env()
    assert settings.page_size == 20
    assert settings.timezone == ZoneInfo("Europe/Berlin")
    assert settings.incremental_merge is True


def test_bad_values_fall_back(monkeypatch):
    monkeypatch.setenv("FEEDBACK_PAGE_SIZE", "zero")
    monkeypatch.setenv("FEEDBACK_TREND_DAYS", "-3")
    monkeypatch.setenv("FEEDBACK_TIMEZONE", "Mars/Olympus_Mons")

    settings = DashboardSettings.from_env()
    assert settings.page_size == 5
    assert settings.trend_days == 7
    assert settings.timezone == ZoneInfo("UTC")
