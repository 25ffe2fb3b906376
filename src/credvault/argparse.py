#
# Copyright 2019 FMR LLC <opensource@fidelity.com>
#
# SPDX-License-Identifier: MIT
#
"""Provides additional actions and formatters for the builtin argparse module."""

import argparse


class RawAndDefaultsFormatter(
    argparse.ArgumentDefaultsHelpFormatter, argparse.RawDescriptionHelpFormatter
):
    """Mixin of ArgumentDefaultsHelpFormatter and RawDescriptionHelpFormatter.

    Keeps the layout of the CLI description while still listing the default
    of each flag, which may come from the user configuration file.
    """


class AppendWithoutDefault(argparse.Action):
    """Argparse action to append to a list without the default.

    With the builtin `append` action, values given on the command line are
    appended to the default list. Defaults for credvault flags come from the
    user configuration, and a flag on the command line should replace them:

        >>> parser = argparse.ArgumentParser()
        >>> parser.add_argument('--gpg-arg', action=AppendWithoutDefault, default=['--quiet'])
        >>> parser.parse_args(['--gpg-arg=--batch', '--gpg-arg=--no-tty'])
        Namespace(gpg_arg=['--batch', '--no-tty'])
        >>> parser.parse_args([])
        Namespace(gpg_arg=['--quiet'])
    """

    def __init__(self, *args, **kwargs):
        self.has_been_called = False
        super().__init__(*args, **kwargs)

    def __call__(self, parser, namespace, values, option_string=None):
        current = [] if not self.has_been_called else getattr(namespace, self.dest)
        current.append(values)
        setattr(namespace, self.dest, current)
        self.has_been_called = True
