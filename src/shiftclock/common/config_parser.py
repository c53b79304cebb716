#!/usr/bin/env python3
"""
Read a configuration file in the .ini format and validate it against a
JSON schema. A default annotated .ini file can be generated from the
schema when the configuration file doesn't exist yet.

The schema declares one block by section and one inner-block by key.
Supported key parameters:
- type: `int`, `float`, `str`, `bool` or `time` ("HH:MM")
- required: the value cannot be left empty
- default: value written in the generated file and used when the key is
    missing from the configuration file
- comment: help comment written before the key in the generated file
- min/max: inclusive range for `int` and `float` values
- enum: list of accepted `str` values
Only the `type` parameter is required.

---
ShiftClock - An open-source attendance tracking engine

Author: Bastian Cerf
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

# Standard libraries
import logging
import json
import configparser
import datetime as dt
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, NamedTuple, Optional, TextIO

logger = logging.getLogger(__name__)

ConfigView = MappingProxyType[str, MappingProxyType[str, Any]]

########################################################################
#                 Configuration parser custom error                    #
########################################################################


class ConfigError(Exception):
    """
    Configuration schema or file error. It's the only error raised by
    this module.
    """

    def __init__(self, msg: str):
        super().__init__(msg)


########################################################################
#                          Value converters                            #
########################################################################


def _str_to_bool(s: str) -> bool:
    """
    Raises:
        ValueError: The string doesn't hold a boolean.
    """
    s = s.strip().lower()
    if s in {"true", "1", "yes", "on"}:
        return True
    if s in {"false", "0", "no", "off"}:
        return False
    raise ValueError(f"Invalid boolean string: {s}")


def _str_to_time(s: str) -> dt.time:
    """
    Raises:
        ValueError: The string isn't a "HH:MM" time.
    """
    return dt.datetime.strptime(s.strip(), "%H:%M").time()


def _value_to_str(value: Any) -> str:
    """
    Convert a value to its .ini literal.

    Raises:
        ValueError: Unsupported value type.
    """
    # bool is an int subclass, check it first
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, dt.time):
        return value.strftime("%H:%M")
    if isinstance(value, (int, float, str)):
        return str(value)
    raise ValueError(f"Unknown type '{type(value).__name__}'")


class ConversionResult(NamedTuple):
    """
    Result of `SchemaField.check_and_convert()`. The `message` is only
    set on error and the `value` only on success.
    """

    error: bool
    message: Optional[str]
    value: Optional[Any]


########################################################################
#                            Schema field                              #
########################################################################


class SchemaField:
    """
    Rules of one configuration key, parsed from its schema inner-block.
    """

    _CONVERTERS: dict[str, Callable[[str], Any]] = {
        "int": int,
        "float": float,
        "str": str,
        "bool": _str_to_bool,
        "time": _str_to_time,
    }

    # Accepted parameters and their JSON types (None for any)
    _PARAMETERS: dict[str, Optional[tuple]] = {
        "type": (str,),
        "required": (bool,),
        "default": None,
        "comment": (str,),
        "min": (int, float),
        "max": (int, float),
        "enum": (list,),
    }

    def __init__(self, key: str, entry: dict[str, Any]):
        """
        Args:
            key (str): Configuration key, used in the error messages.
            entry (dict[str, Any]): Inner-block from the schema.

        Raises:
            ConfigError: Invalid schema entry.
        """
        self._key = key

        unknown = set(entry) - set(self._PARAMETERS)
        if unknown:
            raise ConfigError(
                f"Unrecognized field(s): '{', '.join(sorted(unknown))}' for key '{key}'."
            )

        for param, types in self._PARAMETERS.items():
            if param in entry and types and not isinstance(entry[param], types):
                raise ConfigError(
                    f"Type error for field '{param}' in key '{key}': "
                    f"'{entry[param]}' is a '{type(entry[param]).__name__}', "
                    f"""must be a {" or a ".join(f"'{t.__name__}'" for t in types)}."""
                )

        if "type" not in entry:
            raise ConfigError(f"'type' field missing for key '{key}'.")
        if entry["type"] not in self._CONVERTERS:
            raise ConfigError(f"Type '{entry['type']}' unrecognized for key '{key}'.")

        self._vartype: str = entry["type"]
        self._convert = self._CONVERTERS[self._vartype]
        self._required: bool = entry.get("required", False)
        self._default: Any = entry.get("default")
        self._comment: Optional[str] = entry.get("comment")
        self._min = entry.get("min")
        self._max = entry.get("max")
        self._enum: Optional[list] = entry.get("enum")

    @property
    def vartype(self) -> str:
        return self._vartype

    @property
    def default(self) -> Any:
        return self._default

    @property
    def default_literal(self) -> str:
        """
        Returns:
            str: The default value as written in the .ini file.
        """
        if self._default is None:
            return ""
        return _value_to_str(self._default)

    @property
    def comment(self) -> Optional[str]:
        return self._comment

    def check_and_convert(self, value: str) -> ConversionResult:
        """
        Check the value against the field rules and convert it to the
        field type.

        Args:
            value (str): Raw value from the .ini file.

        Returns:
            ConversionResult: The converted value or the error message.
        """
        if not value:
            if self._required:
                return ConversionResult(True, "Value is required", None)
            return ConversionResult(False, None, None)

        try:
            converted = self._convert(value)
        except ValueError:
            return ConversionResult(
                True,
                f"type error for value '{value}', '{self._vartype}' required",
                None,
            )

        if isinstance(converted, (int, float)) and not isinstance(converted, bool):
            if self._min is not None and converted < self._min:
                return ConversionResult(True, f"{converted} is lower than {self._min}", None)
            if self._max is not None and converted > self._max:
                return ConversionResult(True, f"{converted} is greater than {self._max}", None)

        if self._enum is not None:
            if self._vartype != "str":
                return ConversionResult(
                    True, f"enum is not applicable to '{self._vartype}' values", None
                )
            if not all(isinstance(choice, str) for choice in self._enum):
                return ConversionResult(True, "enum choices must be string values", None)
            if converted not in self._enum:
                return ConversionResult(
                    True,
                    f"'{converted}' is not one of {', '.join(self._enum)}",
                    None,
                )

        return ConversionResult(False, None, converted)


########################################################################
#                  Configuration parser and validator                  #
########################################################################


class ConfigParser:
    """
    Load a configuration file (.ini), validate it against a schema (.json)
    and provide a read-only view on the converted values.
    """

    def __init__(
        self,
        schema: str | Path | TextIO,
        config: Optional[str | Path | TextIO] = None,
        name: Optional[str] = None,
        gen_default: bool = True,
    ):
        """
        Load the schema then, if given, the configuration.

        When `config` is a path to a missing file and `gen_default` is
        set, a default annotated configuration is written there first.

        Args:
            schema (str | Path | TextIO): Schema file path or file-like.
            config (Optional[str | Path | TextIO]): Configuration file
                path or file-like. Leave empty to only load the schema.
            name (Optional[str]): Configuration name used in the messages.
                The configuration file name is used by default, it is
                required for file-like objects.
            gen_default (bool): Generate the configuration file if it
                doesn't exist.

        Raises:
            ConfigError: Invalid schema or configuration.
        """
        self._schema: dict[str, dict[str, SchemaField]] = {}
        self._config = configparser.ConfigParser(interpolation=None)
        self._data: dict[str, dict[str, Any]] = {}

        self._config_path: Optional[Path] = (
            Path(config) if isinstance(config, (str, Path)) else None
        )

        if name:
            self._name = name
        elif self._config_path is not None:
            self._name = self._config_path.name
        else:
            raise ConfigError("A configuration name is required.")

        self._load_schema(schema)

        if gen_default and self._config_path and not self._config_path.exists():
            try:
                with open(self._config_path, "x+", encoding="utf-8") as file:
                    self.generate_default(file)
            except OSError as e:
                raise ConfigError(
                    f"Error generating the default configuration file for '{self._name}'."
                ) from e

            logger.info(f"Initial configuration file setup under '{self._config_path}'.")

        if config is not None:
            self.load_and_check_config(config)

    @property
    def name(self) -> str:
        return self._name

    def _load_schema(self, source: str | Path | TextIO):
        """
        Raises:
            ConfigError: The schema cannot be read or is invalid.
        """
        try:
            if isinstance(source, (str, Path)):
                with open(source, "r", encoding="utf-8") as file:
                    schema = json.load(file)
            else:
                schema = json.load(source)

        except FileNotFoundError as e:
            raise ConfigError(f"Schema file not found for '{self._name}'.") from e
        except OSError as e:
            raise ConfigError(f"OS error occurred opening '{self._name}' schema.") from e
        except json.JSONDecodeError as e:
            raise ConfigError(f"Schema parsing error occurred for '{self._name}'.") from e

        if not isinstance(schema, dict):
            raise ConfigError(f"Schema of '{self._name}' must be a JSON object.")

        for section, keys in schema.items():
            if not isinstance(keys, dict):
                raise ConfigError(f"Section [{section}] of '{self._name}' must be an object.")
            self._schema[section] = {
                key: SchemaField(key, entry) for key, entry in keys.items()
            }

    def _read_config(self, source: str | Path | TextIO):
        """
        Raises:
            ConfigError: The file cannot be read or parsed.
        """
        try:
            if isinstance(source, (str, Path)):
                with open(source, encoding="utf-8") as file:
                    self._config.read_file(file)
            else:
                self._config.read_file(source)

        except configparser.Error as e:
            raise ConfigError(f"A parsing exception occurred opening '{self._name}'.") from e
        except OSError as e:
            raise ConfigError(f"An error occurred reading '{self._name}'.") from e

    def load_and_check_config(self, source: str | Path | TextIO):
        """
        Load a configuration and validate it against the schema.

        Keys missing from the configuration take their schema default,
        unknown sections or keys are rejected.

        Raises:
            ConfigError: Invalid configuration.
        """
        self._read_config(source)
        self._validate()

    def _validate(self):
        extra = [f"+{s}" for s in set(self._config.sections()) - set(self._schema)]
        if extra:
            raise ConfigError(
                f"'{self._name}' sections differ from model: {', '.join(sorted(extra))}."
            )

        for section, fields in self._schema.items():
            if not self._config.has_section(section):
                logger.warning(f"'{self._name}' section [{section}] missing, using defaults.")
                self._config.add_section(section)

            extra = [f"+{k}" for k in set(self._config[section]) - set(fields)]
            if extra:
                raise ConfigError(
                    f"'{self._name}' section [{section}] differs from model: "
                    f"{', '.join(sorted(extra))}."
                )

            self._data[section] = {}
            for key, field in fields.items():
                if key not in self._config[section]:
                    logger.warning(
                        f"'{self._name}' key '{key}' missing in [{section}], "
                        f"using default '{field.default_literal}'."
                    )
                    self._config.set(section, key, field.default_literal)

                result = field.check_and_convert(self._config[section][key])
                if result.error:
                    raise ConfigError(
                        f"Value for key '{key}' in section '{section}' is invalid: "
                        f"{result.message}."
                    )
                self._data[section][key] = result.value

    def generate_default(self, stream: TextIO, annotate: bool = True):
        """
        Write a configuration holding the schema defaults.

        Args:
            stream (TextIO): Destination stream, must be readable when
                `annotate` is set.
            annotate (bool): Write the schema comments before the keys.
        """
        config = configparser.ConfigParser(interpolation=None)
        for section, fields in self._schema.items():
            config[section] = {key: field.default_literal for key, field in fields.items()}

        start = stream.tell()
        config.write(stream, space_around_delimiters=True)

        if annotate:
            self._annotate(stream, start)

    def _annotate(self, stream: TextIO, start: int = 0):
        """
        Insert the schema comments before their key in a written .ini
        stream.
        """
        section = None
        lines = []

        stream.seek(start)
        for line in stream:
            stripped = line.strip()
            if stripped.startswith("[") and stripped.endswith("]"):
                section = stripped[1:-1]
            elif "=" in stripped and section in self._schema:
                key = stripped.split("=", 1)[0].strip()
                field = self._schema[section].get(key)
                if field and field.comment:
                    lines.append(f"; {field.comment}\n")
            lines.append(line)

        # The annotated content is never shorter than the written one
        stream.seek(start)
        stream.writelines(lines)

    def get_view(self) -> ConfigView:
        """
        Get a read-only view on the converted values. The inner mappings
        reflect the values changed with `set_value()`.

        Returns:
            ConfigView: Sections by name, values by key.
        """
        return MappingProxyType(
            {section: MappingProxyType(values) for section, values in self._data.items()}
        )

    def set_value(self, section: str, key: str, value: Any):
        """
        Change a value and save the configuration file, if loaded from a
        path.

        Raises:
            ConfigError: Unknown key, or the value doesn't match the schema
                rules, or the file cannot be written.
        """
        if section not in self._schema or key not in self._schema[section]:
            raise ConfigError(
                f"Section '{section}' or key '{key}' doesn't exist in '{self._name}'."
            )

        try:
            literal = _value_to_str(value)
        except ValueError as e:
            raise ConfigError(
                f"Cannot convert value '{value}' of type '{type(value).__name__}' "
                "to a string literal."
            ) from e

        result = self._schema[section][key].check_and_convert(literal)
        if result.error:
            raise ConfigError(
                f"The value '{literal}' doesn't match the schema rules for "
                f"section '{section}' and key '{key}': {result.message}."
            )

        self._data[section][key] = result.value
        self._config.set(section, key, literal)

        if self._config_path is None:
            return

        try:
            with open(self._config_path, "w+", encoding="utf-8") as file:
                self._config.write(file, space_around_delimiters=True)
                self._annotate(file)
        except OSError as e:
            raise ConfigError(
                f"Error saving the configuration under '{self._config_path}'."
            ) from e

        logger.info(f"Configuration saved under '{self._config_path}'.")