#
# Copyright 2019 FMR LLC <opensource@fidelity.com>
#
# SPDX-License-Identifier: MIT
#
"""Determine the AWS profile to operate on.

The profile is taken from the first of the following that is set and not
empty:

1. The positional argument given to the CLI.
2. The `AWS_PROFILE` environment variable.
3. The `AWS_DEFAULT_PROFILE` environment variable.

There is no fallback to a "default" profile. The AWS CLI exports `AWS_PROFILE`
when it invokes a `credential_process`, so the environment is usually enough.
"""

import logging
import os

LOG = logging.getLogger(__name__)

PROFILE_ENV_VARS = ("AWS_PROFILE", "AWS_DEFAULT_PROFILE")


def resolve_profile(name=None, environ=None):
    """Returns the name of the profile to use.

    `name` is the profile given on the command line, if any. `environ` defaults
    to `os.environ`. Raises `ProfileNotFound` if no profile can be determined.
    """
    if name:
        return name

    environ = os.environ if environ is None else environ
    for var in PROFILE_ENV_VARS:
        value = environ.get(var)
        if value:
            LOG.info("using profile %s from %s", value, var)
            return value

    raise ProfileNotFound(
        "unable to determine AWS profile, pass one or set "
        + " or ".join(PROFILE_ENV_VARS)
    )


class ProfileNotFound(LookupError):
    """Raised if a profile name cannot be determined."""
