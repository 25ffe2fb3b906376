#
# Copyright 2019 FMR LLC <opensource@fidelity.com>
#
# SPDX-License-Identifier: MIT
#
"""Obtain the credentials for a profile from its vault file.

## Overview

This module ties together the other modules of the package. Obtaining the
credentials for a profile consists of the following steps:

1. Locate the vault file for the profile (`credvault.vault`).
2. Decrypt it with the encryption engine (`credvault.gpg`).
3. Parse the plaintext as credentials (`credvault.credentials`).
4. Load the role settings of the profile (`credvault.awsconfig`).
5. If the profile has a `role_arn`, assume the role using the decrypted
   credentials (`credvault.sts`).

`fetch_credentials` performs all of the above:

    creds = fetch_credentials('dev', GPG(), AssumeRoleExchanger())
    print(creds.to_json())

Steps 4 and 5 are available separately as `RoleExchange`, which can also be
handed to a `credvault.vault.CredentialVault` as its `exchange` callable.

## Profiles Without a Role

If a profile has no `role_arn` in the AWS configuration file, or has no
section at all, the decrypted credentials are returned unchanged. A missing or
unreadable AWS configuration file is, however, an error.
"""

import logging

from credvault.awsconfig import load_profile_config
from credvault.credentials import Credentials
from credvault.profile import resolve_profile
from credvault.vault import CredentialVault, ensure_vault_dir, vault_file_path

LOG = logging.getLogger(__name__)


class RoleExchange:
    """Callable that exchanges source credentials for a profile's role.

    Calling an instance with a `credvault.credentials.Credentials` loads the
    role settings for `profile` from the AWS configuration file (`config_file`
    overrides its location) and returns the credentials obtained from the
    `exchanger`, typically a `credvault.sts.AssumeRoleExchanger`. If the
    profile has no role, the source credentials are returned as is.
    """

    def __init__(self, profile, exchanger, config_file=None, environ=None):
        self.profile = profile
        self._exchanger = exchanger
        self._config_file = config_file
        self._environ = environ

    def __call__(self, source):
        cfg = load_profile_config(
            self.profile, config_file=self._config_file, environ=self._environ
        )

        if not cfg.role_arn:
            LOG.info("no role_arn for profile %s, using vault credentials", self.profile)
            return source

        return self._exchanger.exchange(cfg.with_source(source))


def fetch_credentials(
    profile, engine, exchanger, config_file=None, home=None, environ=None
):
    """Returns the `Credentials` for `profile`.

    `engine` decrypts the vault file and `exchanger` assumes the profile's role
    if it has one. An empty `profile` is resolved from `environ`, and the
    resolved name selects both the vault file and the role settings. Raises
    `credvault.vault.VaultFileNotFound` if the profile has no vault file. All
    other errors are passed through from the module responsible for the
    failing step.
    """
    profile = resolve_profile(profile, environ)
    path = vault_file_path(profile, home=home, environ=environ, must_exist=True)

    with CredentialVault(path, engine) as vault:
        source = Credentials.from_json(vault.read())

    return RoleExchange(profile, exchanger, config_file, environ)(source)


def store_credentials(profile, plaintext, engine, recipients=(), home=None):
    """Encrypts `plaintext` credentials into the vault file for `profile`.

    The plaintext must be a credential JSON document with an access key and
    secret, otherwise `credvault.credentials.CredentialParseError` is raised
    and nothing is written. Returns the path of the vault file.
    """
    Credentials.from_json(plaintext).validate()

    profile = resolve_profile(profile)
    ensure_vault_dir(home)
    path = vault_file_path(profile, home=home)
    if path.exists():
        LOG.info("replacing existing vault file %s", path)

    with CredentialVault(path, engine, recipients=recipients) as vault:
        vault.write(plaintext)

    return path
