"""
VSchema DDL Configuration Management

Settings for the command line tool that applies VSchema DDL actions to the
schema store.

Classes:
    SchemaStoreSettings: location and write mode of the schema store
    Settings: Main configuration class

Example config.yaml:

    store:
      data_dir: vschema
      read_only: false
    keyspaces: ['commerce', 'customer_*']
    exclude_keyspaces: 'tmp_*'
    log_level: info
"""

import fnmatch
from dataclasses import dataclass

import yaml


def stype(obj):
    """Get the simple type name of an object.

    Example:
        >>> stype([1, 2, 3])
        'list'
    """
    return type(obj).__name__


@dataclass
class SchemaStoreSettings:
    data_dir: str = "vschema"
    read_only: bool = False

    def validate(self):
        if not isinstance(self.data_dir, str):
            raise ValueError(
                f"store data_dir should be string and not {stype(self.data_dir)}"
            )

        if not self.data_dir:
            raise ValueError("store data_dir should not be empty")

        if not isinstance(self.read_only, bool):
            raise ValueError(
                f"store read_only should be bool and not {stype(self.read_only)}"
            )


class Settings:
    DEFAULT_LOG_LEVEL = "info"

    def __init__(self):
        self.store = SchemaStoreSettings()
        self.keyspaces = "*"
        self.exclude_keyspaces = ""
        self.settings_file = ""
        self.log_level = Settings.DEFAULT_LOG_LEVEL

    def load(self, settings_file):
        with open(settings_file, "r") as f:
            data = yaml.safe_load(f) or {}

        self.settings_file = settings_file
        self.store = SchemaStoreSettings(**data.pop("store", {}))
        self.keyspaces = data.pop("keyspaces", "*")
        self.exclude_keyspaces = data.pop("exclude_keyspaces", "")
        self.log_level = data.pop("log_level", Settings.DEFAULT_LOG_LEVEL)

        if data:
            raise Exception(f"Unsupported config options: {list(data.keys())}")
        self.validate()

    @classmethod
    def is_pattern_matches(cls, substr, pattern):
        if not pattern or pattern == "*":
            return True
        if isinstance(pattern, str):
            return fnmatch.fnmatch(substr, pattern)
        if isinstance(pattern, list):
            for allowed_pattern in pattern:
                if fnmatch.fnmatch(substr, allowed_pattern):
                    return True
            return False
        raise ValueError()

    def is_keyspace_matches(self, keyspace_name):
        if self.exclude_keyspaces and self.is_pattern_matches(
            keyspace_name, self.exclude_keyspaces
        ):
            return False
        return self.is_pattern_matches(keyspace_name, self.keyspaces)

    def validate_log_level(self):
        if self.log_level not in ["critical", "error", "warning", "info", "debug"]:
            raise ValueError(f"wrong log level {self.log_level}")

    def validate(self):
        self.store.validate()
        self.validate_log_level()
        for option in ("keyspaces", "exclude_keyspaces"):
            value = getattr(self, option)
            if not isinstance(value, (str, list)):
                raise ValueError(f"{option} should be string or list and not {stype(value)}")
