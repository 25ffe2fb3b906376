#
# Copyright 2019 FMR LLC <opensource@fidelity.com>
#
# SPDX-License-Identifier: MIT
#
"""Provides the credvault user configuration with type-checked values.

## Overview

The credvault CLI reads an optional YAML file, ~/.credvault.yaml by default or
the path in the `CREDVAULT_CONFIG` environment variable, which supplies default
values for its command line flags:

    CLI:
      log_level: INFO
      engine_log: true
    GPG:
      path: /usr/local/bin/gpg
      args:
        - --quiet
        - --batch
      recipients:
        - pete@example.com
    STS:
      duration: 3600
      region: us-east-1
      mfa_prompt: true

`Config.from_file` picks a parser based on the file extension. YAML (`.yaml`,
`.yml`) and JSON (`.json`) are registered by default.

## Reading Values

`Config.get` follows a path of keys into the configuration and optionally
type-checks the value found there:

    c = Config.from_file('~/.credvault.yaml')
    assert c.get('STS', 'duration', type=Int, default=3600) == 3600
    assert c.get('GPG', 'args', type=List(Str), default=[]) == ['--quiet', '--batch']
    assert c.get('CLI', 'log_level', type=Choice('DEBUG', 'INFO')) == 'INFO'

If a value does not match the expected type, a `TypeError` is raised that
names the offending key path, which the CLI reports to the user.
"""

import json
import logging
from functools import reduce
from pathlib import Path

import yaml

LOG = logging.getLogger(__name__)

# pylint: disable=unidiomatic-typecheck
#
# isinstance(True, int) is true, so exact type comparisons are used below. A
# bool must not type check as an int.


class Config:
    """A `Config` reads type-checked values from a Python dictionary.

    The class also keeps a registry of parsers by file extension so that
    `Config.from_file` can load the appropriate file type.
    """

    _filetypes = {}

    @classmethod
    def register_filetype(cls, config_class, *extensions):
        """Register a parser for files with one of the specified extensions.

        Extensions are specified as '.ext'. A later registration for the same
        extension replaces the earlier one.
        """
        for ext in extensions:
            cls._filetypes[ext] = config_class

    @classmethod
    def from_file(cls, filename, must_exist=False):
        """Factory method to load a `Config` from a filename.

        If the file does not exist, an empty `Config` is returned unless
        `must_exist` is true, in which case `FileNotFoundError` is raised.
        """
        path = Path(filename).expanduser()

        if not path.is_file():
            if must_exist:
                raise FileNotFoundError(f"Config file not found: {filename}")
            LOG.debug("no user config at %s", path)
            return Config({})

        if path.suffix not in cls._filetypes:
            raise ValueError(f"Unregistered file type extension: {path.suffix}")

        LOG.debug("loading user config from %s", path)
        with path.open(encoding="utf-8") as f:
            return cls._filetypes[path.suffix](f)

    def __init__(self, d):
        self.conf = d if d is not None else {}

    def get(self, *keys, default=None, type=None, must_exist=False):
        """Return the value at the path of `keys`.

        If there is no value, `default` is returned unless `must_exist` is
        true, in which case a `ValueError` is raised. If `type` is given, the
        value must type check against it or a `TypeError` is raised.
        """
        # pylint: disable=redefined-builtin
        try:
            value = reduce(lambda a, p: a.get(p, {}), keys, self.conf)
        except AttributeError as e:
            raise ValueError(
                f"Error in config: {'->'.join(keys[:-1])}: not a dictionary"
            ) from e

        # {} means the key does not exist
        if value == {}:
            if must_exist:
                raise ValueError(f"Error in config: {'->'.join(keys)}: must be set")
            value = default

        if value is None or not type:
            return value

        if type.type_check(value):
            return value

        raise TypeError(
            f"Error in config: {'->'.join(keys)}: not a {type}: {repr(value)}"
        )


class YAMLConfig(Config):
    """Loads a YAML configuration from a stream."""

    def __init__(self, stream):
        super().__init__(yaml.safe_load(stream))


class JSONConfig(Config):
    """Loads a JSON configuration from a stream."""

    def __init__(self, stream):
        super().__init__(json.load(stream))


Config.register_filetype(JSONConfig, ".json")
Config.register_filetype(YAMLConfig, ".yaml", ".yml")


class Type:
    """Represents a type that can be used in type-check comparisons."""

    def type_check(self, obj):
        """Returns true if obj is a type matching this `Type`."""
        raise NotImplementedError

    def __str__(self):
        raise NotImplementedError


class Or(Type):
    """Represents a type that is one of the `config_types`."""

    def __init__(self, *config_types):
        self.config_types = config_types

    def type_check(self, obj):
        return any(t.type_check(obj) for t in self.config_types)

    def __str__(self):
        return "(" + " or ".join(str(t) for t in self.config_types) + ")"


class Const(Type):
    """Represents a constant value."""

    def __init__(self, const):
        self.const = const

    def type_check(self, obj):
        # True == 1, so the types must match as well.
        if type(obj) != type(self.const):  # noqa: E721
            return False
        return obj == self.const

    def __str__(self):
        return f"constant '{self.const}'"


class Choice(Or):
    """Represents a choice of constants, such as log level names."""

    def __init__(self, *constants):
        super().__init__(*[Const(c) for c in constants])


class Scalar(Type):
    """Represents a scalar of the builtin `type_`, such as `str` or `int`."""

    def __init__(self, type_):
        self.type = type_

    def type_check(self, obj):
        return type(obj) == self.type  # noqa: E721

    def __str__(self):
        return self.type.__name__


class List(Type):
    """Represents a list containing elements of `element_type`."""

    def __init__(self, element_type):
        self.element_type = element_type

    def type_check(self, obj):
        if type(obj) != list:  # noqa: E721
            return False
        return all(self.element_type.type_check(e) for e in obj)

    def __str__(self):
        return f"list of {self.element_type}"


Str = Scalar(str)
"""Singleton representing a str."""

Int = Scalar(int)
"""Singleton representing an int."""

Bool = Scalar(bool)
"""Singleton representing a bool."""
