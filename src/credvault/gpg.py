#
# Copyright 2019 FMR LLC <opensource@fidelity.com>
#
# SPDX-License-Identifier: MIT
#
"""Encrypt and decrypt vault contents with the gpg command line tool.

## Overview

`credvault` does not implement any cryptography itself. Vault files are
ordinary gpg messages, so they can be created and inspected with gpg directly:

    $ gpg --encrypt --recipient pete@example.com < dev.json > ~/.aws/creds-vault/dev
    $ gpg --decrypt < ~/.aws/creds-vault/dev

The `GPG` class runs the `gpg` executable found in the user's PATH, feeding it
bytes on standard input and collecting the result from standard output. Any
passphrase prompts are handled by gpg-agent and pinentry, not by this module.

## Diagnostics

gpg writes status messages to standard error. By default these are captured
and included in `EngineError` should gpg fail. Alternatively, a file object can
be passed as `stderr` to send them elsewhere. The CLI uses `open_engine_log` to
append them to `~/.aws/creds-vault/vault.log`. gpg does not print decrypted
content on standard error, so the log never contains credentials.
"""

import logging
import os
import shutil
import subprocess

from credvault.vault import vault_dir

LOG = logging.getLogger(__name__)

GPG_EXECUTABLE = "gpg"
ENGINE_LOG_FILENAME = "vault.log"


class GPG:
    """Runs gpg to encrypt and decrypt byte strings.

    The `path` to the gpg executable defaults to the first `gpg` found in the
    PATH. `EngineNotFound` is raised if there is none. `args` is an optional
    list of extra arguments appended to every invocation, for example
    `["--quiet", "--batch"]`. If `stderr` is a file object, gpg's diagnostics
    are written there instead of being captured.
    """

    def __init__(self, path=None, args=None, stderr=None):
        self.path = path or shutil.which(GPG_EXECUTABLE)
        if not self.path:
            raise EngineNotFound(
                f"unable to find '{GPG_EXECUTABLE}' in PATH, have you installed it?"
            )
        self.args = list(args or [])
        self.stderr = stderr

    def decrypt(self, ciphertext):
        """Returns the plaintext bytes of `ciphertext`."""
        return self.run(["--decrypt"], ciphertext)

    def encrypt(self, plaintext, recipients=()):
        """Returns `plaintext` encrypted for each of the `recipients`.

        With no recipients, gpg falls back to its `default-recipient` setting.
        """
        opts = ["--encrypt"]
        for recipient in recipients:
            opts += ["--recipient", recipient]
        return self.run(opts, plaintext)

    def run(self, opts, data):
        """Runs gpg with `opts` and `data` on stdin and returns its stdout.

        Raises `EngineError` if gpg exits with a non-zero status.
        """
        cmd = [self.path] + opts + self.args
        LOG.info("running %s", cmd)

        result = subprocess.run(
            cmd,
            input=data,
            check=False,
            stdout=subprocess.PIPE,
            stderr=self.stderr if self.stderr is not None else subprocess.PIPE,
        )

        diagnostics = result.stderr.decode("utf-8", "replace") if result.stderr else ""
        if diagnostics:
            LOG.debug("gpg: %s", diagnostics.strip())

        if result.returncode != 0:
            raise EngineError(result.returncode, diagnostics)

        return result.stdout


def open_engine_log(home=None):
    """Returns a file object appending to the engine log in the vault directory.

    The file is created with mode 0640 if it does not exist. The caller is
    responsible for closing it.
    """
    path = vault_dir(home) / ENGINE_LOG_FILENAME
    fd = os.open(path, os.O_WRONLY | os.O_APPEND | os.O_CREAT, 0o640)
    LOG.info("appending gpg diagnostics to %s", path)
    return os.fdopen(fd, "ab")


class EngineNotFound(FileNotFoundError):
    """Raised if the gpg executable cannot be found."""


class EngineError(RuntimeError):
    """Raised if gpg exits with a non-zero status."""

    def __init__(self, returncode, diagnostics=""):
        msg = f"gpg exited with status {returncode}"
        if diagnostics:
            msg += f": {diagnostics.strip()}"
        super().__init__(msg)
        self.returncode = returncode
        self.diagnostics = diagnostics
