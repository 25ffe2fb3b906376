#
# Copyright 2019 FMR LLC <opensource@fidelity.com>
#
# SPDX-License-Identifier: MIT
#
"""Read role settings for a profile from the AWS CLI configuration file.

## Overview

Role assumption is configured with the same keys the AWS CLI uses in
~/.aws/config, so an existing profile definition can be reused as is:

    [profile dev]
    credential_process = credvault dev
    role_arn = arn:aws:iam::111222333444:role/Developer
    role_session_name = pete
    external_id = 12345
    mfa_serial = arn:aws:iam::111222333444:mfa/pete

Only `role_arn`, `role_session_name`, `external_id`, and `mfa_serial` are read.
Sections can be named either `profile NAME` (the AWS CLI convention) or just
`NAME`. A profile without a section is not an error; all of its settings are
simply empty, which means no role is assumed.

The configuration file is located via the `AWS_CONFIG_FILE` environment
variable, or ~/.aws/config if it is not set. Parsing is done with botocore's
shared config parser so nested settings are handled the same way the AWS CLI
handles them.
"""

import logging
import os
from pathlib import Path

import botocore.configloader
import botocore.exceptions

LOG = logging.getLogger(__name__)

DEFAULT_SESSION_NAME = "aws-gpg-vault-session"
"""Role session name used when a profile does not specify one."""

CONFIG_FILE_ENV_VAR = "AWS_CONFIG_FILE"
DEFAULT_CONFIG_FILE = Path(".aws", "config")


class ProfileConfig:
    """Role assumption settings for a single profile.

    Instances are not modified after construction. Use `with_source` to obtain
    a copy bound to the credentials that will be used to assume the role.
    `config_file` is the AWS configuration file the settings were read from.
    """

    def __init__(
        self,
        profile,
        role_arn="",
        session_name=DEFAULT_SESSION_NAME,
        external_id="",
        mfa_serial="",
        source=None,
        config_file=None,
    ):
        self.profile = profile
        self.role_arn = role_arn or ""
        self.session_name = session_name or DEFAULT_SESSION_NAME
        self.external_id = external_id or ""
        self.mfa_serial = mfa_serial or ""
        self.source = source
        self.config_file = config_file

    def with_source(self, source):
        """Returns a copy of this config using `source` credentials."""
        return ProfileConfig(
            self.profile,
            role_arn=self.role_arn,
            session_name=self.session_name,
            external_id=self.external_id,
            mfa_serial=self.mfa_serial,
            source=source,
            config_file=self.config_file,
        )

    def __repr__(self):
        return (
            f"ProfileConfig(profile={self.profile!r}, role_arn={self.role_arn!r}, "
            f"session_name={self.session_name!r}, mfa={bool(self.mfa_serial)})"
        )


def config_file_path(environ=None):
    """Returns the path to the AWS configuration file."""
    environ = os.environ if environ is None else environ
    path = environ.get(CONFIG_FILE_ENV_VAR)
    return Path(path).expanduser() if path else Path.home() / DEFAULT_CONFIG_FILE


def load_profile_config(profile, config_file=None, environ=None):
    """Returns the `ProfileConfig` for `profile`.

    `config_file` overrides the location of the AWS configuration file.
    Raises `ConfigFileNotFound` if the file is missing or cannot be parsed.
    """
    path = config_file or config_file_path(environ)

    try:
        sections = botocore.configloader.raw_config_parse(str(path))
    except (
        botocore.exceptions.ConfigNotFound,
        botocore.exceptions.ConfigParseError,
    ) as e:
        raise ConfigFileNotFound(f"unable to load AWS config file: {e}") from e

    section = sections.get(f"profile {profile}", sections.get(profile))
    if section is None:
        LOG.info("no section for profile %s in %s", profile, path)
        section = {}

    cfg = ProfileConfig(
        profile,
        role_arn=section.get("role_arn", ""),
        session_name=section.get("role_session_name", ""),
        external_id=section.get("external_id", ""),
        mfa_serial=section.get("mfa_serial", ""),
        config_file=path,
    )
    LOG.info("loaded %s from %s", cfg, path)
    return cfg


class ConfigFileNotFound(FileNotFoundError):
    """Raised if the AWS configuration file cannot be found or parsed."""
