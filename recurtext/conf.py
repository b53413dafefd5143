from datetime import datetime
from functools import wraps

DEFAULT_SETTINGS = {
    "RELATIVE_BASE": None,
    "TIMEZONE": "local",
    "MIDNIGHT_AS_ZERO_HOUR": True,
}


class SettingValidationError(ValueError):
    pass


class Settings:
    """Control and configure default parsing behavior of recurtext.

    Currently applied settings:
        * `RELATIVE_BASE`: datetime used as "now" by ``for <n> <period>``.
        * `TIMEZONE`: timezone of the wall clock when no base is given.
        * `MIDNIGHT_AS_ZERO_HOUR`: read ``12am`` as ``00:00``.
    """

    _default = True

    def __init__(self, settings=None):
        values = dict(DEFAULT_SETTINGS)
        if settings:
            values.update(settings)
        for key, value in values.items():
            setattr(self, key, value)
        self._mod_settings = dict(settings or {})

    def replace(self, mod_settings=None, **kwds):
        for k, v in kwds.items():
            if v is None:
                raise TypeError('Invalid {{"{}": {}}}'.format(k, v))

        mod_settings = dict(mod_settings or {})
        mod_settings.update(kwds)
        check_settings(mod_settings)

        merged = dict(self._mod_settings)
        merged.update(mod_settings)
        new_settings = Settings(merged)
        new_settings._default = False
        return new_settings

    def __repr__(self):
        values = ", ".join(
            "{}={!r}".format(key, getattr(self, key)) for key in DEFAULT_SETTINGS
        )
        return "Settings({})".format(values)


settings = Settings()


def apply_settings(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        mod_settings = kwargs.get("settings")

        if mod_settings is None:
            kwargs["settings"] = settings
        elif isinstance(mod_settings, Settings):
            kwargs["settings"] = mod_settings
        elif isinstance(mod_settings, dict):
            kwargs["settings"] = settings.replace(mod_settings=mod_settings)
        else:
            raise TypeError("settings can only be either dict or instance of Settings class")

        return f(*args, **kwargs)

    return wrapper


def _check_relative_base(setting_name, setting_value):
    if setting_value is not None and not isinstance(setting_value, datetime):
        raise SettingValidationError(
            '"{}" must be a datetime or None, not {}'.format(
                setting_name, type(setting_value).__name__
            )
        )


def _check_timezone(setting_name, setting_value):
    from dateutil import tz

    if not isinstance(setting_value, str):
        raise SettingValidationError(
            '"{}" must be "str", not "{}"'.format(
                setting_name, type(setting_value).__name__
            )
        )
    if "local" in setting_value.lower():
        return
    if tz.gettz(setting_value) is None:
        raise SettingValidationError(
            '"{}" is not a valid value for "{}"'.format(setting_value, setting_name)
        )


def _check_bool(setting_name, setting_value):
    if not isinstance(setting_value, bool):
        raise SettingValidationError(
            '"{}" must be "bool", not "{}"'.format(
                setting_name, type(setting_value).__name__
            )
        )


_SETTING_CHECKS = {
    "RELATIVE_BASE": _check_relative_base,
    "TIMEZONE": _check_timezone,
    "MIDNIGHT_AS_ZERO_HOUR": _check_bool,
}


def check_settings(settings):
    """Validate a dict of user-supplied settings.

    :raises: SettingValidationError
    """
    for setting_name, setting_value in settings.items():
        if setting_name not in _SETTING_CHECKS:
            raise SettingValidationError('"{}" is not a valid setting'.format(setting_name))
        _SETTING_CHECKS[setting_name](setting_name, setting_value)
