# zeit/core/validations.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from datetime import timedelta

from zeit.core.errors import ConfigurationError
from zeit.core.state import RepeatMode, ScheduleConfiguration, never


class Validator:
    """
    Checks a schedule configuration before the scheduler arms its first timer.
    """

    def __init__(self) -> None:
        self._rules_engine = _ValidationRulesEngine()

    def validate_configuration(self, config: ScheduleConfiguration) -> None:
        """
        Check the configuration for consistency.

        :param config: The frozen configuration produced by a builder.
        :raises ConfigurationError: If validation fails.
        """
        self._rules_engine.validate_configuration(config)


class _ValidationRulesEngine:
    """
    Internal engine applying the rule set in order. The first failing rule
    raises.
    """

    def __init__(self) -> None:
        self._default_rules = _DefaultValidationRules

    def validate_configuration(self, config: ScheduleConfiguration) -> None:
        self._default_rules.validate_callables(config)
        self._default_rules.validate_name(config)
        self._default_rules.validate_timing(config)
        self._default_rules.validate_invocation_limit(config)
        self._default_rules.validate_post_condition(config)


class _DefaultValidationRules:
    """
    Built-in rules.
    """

    @staticmethod
    def validate_callables(config: ScheduleConfiguration) -> None:
        if not callable(config.callback):
            raise ConfigurationError("Scheduled callback must be callable.")
        if not callable(config.pre_predicate):
            raise ConfigurationError("whilst() predicate must be callable.")
        if not callable(config.post_predicate):
            raise ConfigurationError("until() predicate must be callable.")

    @staticmethod
    def validate_name(config: ScheduleConfiguration) -> None:
        if config.name is not None and not isinstance(config.name, str):
            raise ConfigurationError(f"Schedule name must be a string, got {type(config.name).__name__}.")

    @staticmethod
    def validate_timing(config: ScheduleConfiguration) -> None:
        """
        Initial delay is a non-negative duration; a repeat mode needs a
        non-negative repeat interval and no repeat mode allows none.
        """
        if not isinstance(config.initial_delay, timedelta):
            raise ConfigurationError(f"Initial delay must be a duration, got {config.initial_delay!r}.")
        if config.initial_delay < timedelta(0):
            raise ConfigurationError(f"Initial delay must not be negative, got {config.initial_delay}.")

        if config.repeat_mode is RepeatMode.NONE:
            if config.repeat_interval is not None:
                raise ConfigurationError("A repeat interval requires a repeat mode.")
            return

        if not isinstance(config.repeat_interval, timedelta):
            raise ConfigurationError(f"Repeat interval must be a duration, got {config.repeat_interval!r}.")
        if config.repeat_interval < timedelta(0):
            raise ConfigurationError(f"Repeat interval must not be negative, got {config.repeat_interval}.")

    @staticmethod
    def validate_invocation_limit(config: ScheduleConfiguration) -> None:
        limit = config.invocation_limit
        if limit is None:
            return
        if isinstance(limit, bool) or not isinstance(limit, int):
            raise ConfigurationError(f"Invocation limit must be an integer, got {limit!r}.")
        if limit < 1:
            raise ConfigurationError(f"Invocation limit must be positive, got {limit}.")

    @staticmethod
    def validate_post_condition(config: ScheduleConfiguration) -> None:
        """
        until() only makes sense when the schedule can run more than once.
        """
        if config.post_predicate is never:
            return
        if config.repeats:
            return
        if config.invocation_limit is not None and config.invocation_limit > 1:
            return
        raise ConfigurationError("Cannot specify until() without a repeat mode or an invocation limit above one.")
