#!/usr/bin/env python3
"""
Read, parse and validate the local configuration file `local_config.ini`
against its schema under `assets/config/local_config_schema.json`.

---
ShiftClock - An open-source attendance tracking engine

Author: Bastian Cerf
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

# Standard libraries
import logging
import datetime as dt
from dataclasses import fields
from pathlib import Path
from types import MappingProxyType
from typing import Any, Optional, TextIO
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

# Internal libraries
from .common.config_parser import ConfigParser, ConfigError
from .core.rules import AttendanceRules

logger = logging.getLogger(__name__)

SCHEMA_FILE_PATH = Path(__file__).parent / "assets" / "config" / "local_config_schema.json"
CONFIG_FILE_PATH = Path("local_config.ini")


class LocalConfig:
    """
    Configuration of the attendance engine host. The values are read-only
    once loaded, `persist()` changes a value and saves the file.
    """

    def __init__(
        self,
        path: Optional[str | Path | TextIO] = None,
        name: Optional[str] = None,
    ):
        """
        Load and validate the configuration. A default configuration file
        is created if `path` doesn't exist.

        Args:
            path (Optional[str | Path | TextIO]): Configuration file path
                or file-like, `CONFIG_FILE_PATH` by default.
            name (Optional[str]): Configuration name, required for a
                file-like.

        Raises:
            ConfigError: Invalid configuration.
        """
        self._config_path = CONFIG_FILE_PATH if path is None else path
        self._config = ConfigParser(
            SCHEMA_FILE_PATH, self._config_path, name=name, gen_default=True
        )
        self._view = self._config.get_view()

    @property
    def name(self) -> str:
        return self._config.name

    def section(self, section: str) -> MappingProxyType[str, Any]:
        """
        Returns:
            MappingProxyType: A read-only view on a data section.
        """
        return self._view[section]

    def rules(self) -> AttendanceRules:
        """
        Build the engine rules from the `[rules]` section.

        Returns:
            AttendanceRules: Configured rules.
        """
        values = self.section("rules")
        return AttendanceRules(**{f.name: values[f.name] for f in fields(AttendanceRules)})

    def tzinfo(self) -> Optional[dt.tzinfo]:
        """
        Returns:
            Optional[dt.tzinfo]: Configured timezone, `None` for the
                system timezone.

        Raises:
            ConfigError: Unknown timezone.
        """
        key = self.section("general")["timezone"]
        if not key:
            return None
        try:
            return ZoneInfo(key)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ConfigError(f"Unknown timezone '{key}' in '{self.name}'.") from e

    def persist(self, section: str, key: str, value: Any):
        """
        Persist a value in the local configuration.
        """
        self._config.set_value(section, key, value)

    def show_config(self):
        """
        Log the local configuration in use, section by section.
        """
        logger.info(f"Using local configuration '{self.name}'.")
        for section, values in self._view.items():
            logger.info(f"Section [{section}] = {dict(values)}")
