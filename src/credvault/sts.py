#
# Copyright 2019 FMR LLC <opensource@fidelity.com>
#
# SPDX-License-Identifier: MIT
#
"""Exchange static credentials for temporary role credentials via STS.

## Overview

`AssumeRoleExchanger` takes a `credvault.awsconfig.ProfileConfig` whose
`source` holds the credentials decrypted from a vault file and calls the STS
AssumeRole API with them. The result is a new set of temporary
`credvault.credentials.Credentials`:

    exchanger = AssumeRoleExchanger()
    cfg = load_profile_config('dev').with_source(creds)
    temp_creds = exchanger.exchange(cfg)

Exactly one call is made to STS. Errors raised by boto3, such as an
`AccessDenied` `botocore.exceptions.ClientError`, are not caught here.

## MFA

If the profile defines an `mfa_serial`, STS requires a one-time code from the
MFA device. The code is obtained by calling the `token_provider` given to the
constructor with the serial number of the device. `prompt_mfa_token` is a
provider that asks the user on the terminal:

    exchanger = AssumeRoleExchanger(token_provider=prompt_mfa_token)

Without a token provider, exchanging credentials for a profile with an
`mfa_serial` raises `MFATokenProviderMissing` before STS is contacted.
"""

import getpass
import logging
from datetime import datetime, timedelta, timezone

import boto3
import botocore.session

from credvault.credentials import CREDENTIAL_SOURCE_VERSION, Credentials

LOG = logging.getLogger(__name__)

DEFAULT_DURATION = 3600
"""Default lifetime, in seconds, of the temporary credentials."""

# Overrides botocore's lookup of the `profile` variable so that it is never
# read from the environment or the config file.
NO_PROFILE_SESSION_VARS = {"profile": (None, None, None, None)}


class AssumeRoleExchanger:
    """Obtains temporary credentials by assuming the role of a profile.

    The `token_provider` is a callable accepting the MFA serial number and
    returning the current one-time code as a string. It is only required for
    profiles with an `mfa_serial`. The temporary credentials are requested for
    `duration` seconds. STS is contacted in `region` if specified, otherwise
    boto3 picks the endpoint. The `session_factory` is used to build the boto3
    session holding the source credentials and defaults to `boto3.Session`. It
    is given a `botocore_session` that reads the profile's AWS configuration
    file but never selects a named profile, so `AWS_PROFILE` has no effect.
    """

    def __init__(
        self,
        token_provider=None,
        duration=DEFAULT_DURATION,
        region=None,
        session_factory=boto3.Session,
    ):
        self._token_provider = token_provider
        self._duration = duration
        self._region = region
        self._session_factory = session_factory

    def exchange(self, profile_config):
        """Returns temporary `Credentials` for the role in `profile_config`.

        Raises `RoleArnNotFound` if the profile has no role, and
        `MFATokenProviderMissing` if the profile requires MFA but no token
        provider was supplied.
        """
        if not profile_config.role_arn:
            raise RoleArnNotFound(
                f"unable to determine role_arn for profile {profile_config.profile}"
            )

        if profile_config.mfa_serial and self._token_provider is None:
            raise MFATokenProviderMissing(
                f"profile {profile_config.profile} requires MFA but no token "
                "provider has been configured"
            )

        source = profile_config.source.validate()
        session = self._session_factory(
            botocore_session=_static_botocore_session(profile_config.config_file),
            aws_access_key_id=source.access_key_id,
            aws_secret_access_key=source.secret_access_key,
            aws_session_token=source.session_token or None,
            region_name=self._region,
        )
        sts = session.client("sts")

        kwargs = {
            "RoleArn": profile_config.role_arn,
            "RoleSessionName": profile_config.session_name,
            "DurationSeconds": self._duration,
        }

        if profile_config.external_id:
            kwargs["ExternalId"] = profile_config.external_id

        if profile_config.mfa_serial:
            kwargs["SerialNumber"] = profile_config.mfa_serial
            kwargs["TokenCode"] = self._token_provider(profile_config.mfa_serial)

        LOG.info(
            "assuming role %s with session name %s",
            profile_config.role_arn,
            profile_config.session_name,
        )
        assumed_role = sts.assume_role(**kwargs)

        creds = dict(assumed_role["Credentials"])
        if not creds.get("Expiration"):
            creds["Expiration"] = datetime.now(timezone.utc) + timedelta(
                seconds=self._duration
            )

        return Credentials.from_sts(creds, version=CREDENTIAL_SOURCE_VERSION)


def _static_botocore_session(config_file=None):
    """Returns a botocore session that never selects a named profile.

    The session is only a carrier for the source credentials. `AWS_PROFILE`
    and `AWS_DEFAULT_PROFILE` are ignored, so settings such as the region come
    from the `[default]` section of `config_file`, if any.
    """
    session = botocore.session.Session(session_vars=NO_PROFILE_SESSION_VARS)
    if config_file:
        session.set_config_variable("config_file", str(config_file))
    return session


def prompt_mfa_token(mfa_serial):
    """Asks the user for the MFA code of `mfa_serial` on the terminal.

    The prompt is written to the controlling terminal rather than stdout, which
    is reserved for the credentials.
    """
    return getpass.getpass(f"Enter MFA code for {mfa_serial}: ").strip()


class MFATokenProviderMissing(RuntimeError):
    """Raised if a profile requires MFA but no token provider is available."""


class RoleArnNotFound(LookupError):
    """Raised if a profile does not specify a role to assume."""
