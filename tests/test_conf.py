from datetime import datetime

import pytest

from recurtext.conf import SettingValidationError, Settings, apply_settings, check_settings, settings


class TestSettings:

    def test_defaults(self):
        assert settings.RELATIVE_BASE is None
        assert settings.TIMEZONE == "local"
        assert settings.MIDNIGHT_AS_ZERO_HOUR is True
        assert settings._default

    def test_replace_returns_modified_copy(self):
        modified = settings.replace(TIMEZONE="UTC")
        assert modified.TIMEZONE == "UTC"
        assert not modified._default
        assert settings.TIMEZONE == "local"

    def test_replace_keeps_earlier_modifications(self):
        base = datetime(2026, 1, 1)
        modified = settings.replace(RELATIVE_BASE=base).replace(TIMEZONE="UTC")
        assert modified.RELATIVE_BASE == base
        assert modified.TIMEZONE == "UTC"

    def test_replace_rejects_none_keyword(self):
        with pytest.raises(TypeError):
            settings.replace(TIMEZONE=None)


class TestCheckSettings:

    @pytest.mark.parametrize("mod_settings", [
        {"NOT_A_SETTING": True},
        {"RELATIVE_BASE": "2026-01-01"},
        {"TIMEZONE": 5},
        {"TIMEZONE": "Mars/Olympus_Mons"},
        {"MIDNIGHT_AS_ZERO_HOUR": "yes"},
    ])
    def test_invalid(self, mod_settings):
        with pytest.raises(SettingValidationError):
            check_settings(mod_settings)

    @pytest.mark.parametrize("mod_settings", [
        {"RELATIVE_BASE": datetime(2026, 1, 1)},
        {"RELATIVE_BASE": None},
        {"TIMEZONE": "Europe/London"},
        {"TIMEZONE": "local"},
        {"MIDNIGHT_AS_ZERO_HOUR": False},
    ])
    def test_valid(self, mod_settings):
        check_settings(mod_settings)


class TestApplySettings:

    @apply_settings
    def receive(self, settings=None):
        return settings

    def test_default_instance(self):
        assert self.receive() is settings

    def test_dict_is_converted(self):
        received = self.receive(settings={"MIDNIGHT_AS_ZERO_HOUR": False})
        assert isinstance(received, Settings)
        assert received.MIDNIGHT_AS_ZERO_HOUR is False

    def test_instance_is_passed_through(self):
        custom = Settings({"TIMEZONE": "UTC"})
        assert self.receive(settings=custom) is custom

    def test_other_types_rejected(self):
        with pytest.raises(TypeError):
            self.receive(settings=["TIMEZONE"])
