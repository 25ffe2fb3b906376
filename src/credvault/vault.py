#
# Copyright 2019 FMR LLC <opensource@fidelity.com>
#
# SPDX-License-Identifier: MIT
#
"""Locate, read, and write encrypted vault files.

## Overview

Each profile's credentials live in a single gpg-encrypted file named after the
profile in the vault directory:

    ~/.aws/creds-vault/
        dev
        prod
        vault.log

`vault_file_path` maps a profile name to its file. Whether a missing file is an
error is left to the caller: pass `must_exist=True` to have
`VaultFileNotFound` raised, or check the returned path yourself (for example,
before importing credentials for a new profile).

## Reading and Writing

`CredentialVault` is a file-like object for one vault file. Reading returns the
decrypted plaintext:

    engine = GPG()
    with CredentialVault(vault_file_path('dev'), engine) as vault:
        creds = Credentials.from_json(vault.read())

The first read decrypts the whole file into memory. Subsequent reads are served
from that buffer until it is exhausted, after which reads return `b""`. The
buffer is never rewound.

What a write does depends on how the vault was constructed. By default, the
plaintext written is encrypted for the given `recipients` and replaces the
vault file. If an `exchange` callable is given, the written bytes are parsed as
credentials and passed to it, and its return value becomes
`CredentialVault.credentials`; the vault file is left untouched:

    exchange = RoleExchange('dev', AssumeRoleExchanger())
    with CredentialVault(path, engine, exchange=exchange) as vault:
        vault.write(vault.read())
        print(vault.credentials.to_json())

A write always accounts for every byte it was given. If the work triggered by
a write fails, `VaultWriteError` is raised with its `characters_written` set to
the number of bytes passed in and the original error chained as its cause.
"""

import io
import logging
import os
from pathlib import Path

from credvault.credentials import Credentials
from credvault.profile import resolve_profile

LOG = logging.getLogger(__name__)

VAULT_BASE_DIR = Path(".aws", "creds-vault")
"""Location of the vault directory relative to the home directory."""


def vault_dir(home=None):
    """Returns the path to the vault directory.

    `home` defaults to the current user's home directory.
    """
    home = Path.home() if home is None else Path(home)
    return home / VAULT_BASE_DIR


def ensure_vault_dir(home=None):
    """Creates the vault directory, readable only by the user, if missing."""
    path = vault_dir(home)
    path.mkdir(mode=0o700, parents=True, exist_ok=True)
    return path


def vault_file_path(name="", home=None, environ=None, must_exist=False):
    """Returns the path to the vault file for profile `name`.

    If `name` is empty, the profile is resolved via
    `credvault.profile.resolve_profile` using `environ`. If the file does not
    exist and `must_exist` is true, `VaultFileNotFound` is raised, otherwise
    the path is returned regardless. Raises `InvalidProfileName` if `name`
    contains a path separator or is `.` or `..`.
    """
    if not name:
        name = resolve_profile(environ=environ)

    if name in (".", "..") or any(
        sep and sep in name for sep in (os.sep, os.altsep, "/")
    ):
        raise InvalidProfileName(name)

    path = vault_dir(home) / name
    if not path.exists():
        LOG.info("vault file %s does not exist", path)
        if must_exist:
            raise VaultFileNotFound(path)

    return path


def decrypt_vault(path, engine):
    """Returns the decrypted contents of the vault file at `path`."""
    path = Path(path)
    LOG.info("decrypting %s", path)
    return engine.decrypt(path.read_bytes())


class CredentialVault(io.RawIOBase):
    """A readable and writable stream over one encrypted vault file.

    `path` is the vault file and `engine` is the encryption engine, typically
    `credvault.gpg.GPG`. If `exchange` is provided, it must be a callable
    accepting a `credvault.credentials.Credentials` and returning a new one;
    writes are then parsed and exchanged rather than stored. Otherwise,
    writes are encrypted for `recipients` and saved to `path`.

    Refer to the module documentation for details on reading and writing.
    """

    def __init__(self, path, engine, exchange=None, recipients=()):
        super().__init__()
        self.path = Path(path)
        self.credentials = None
        self._engine = engine
        self._exchange = exchange
        self._recipients = list(recipients)
        self._body = None
        self._cur = 0

    def readable(self):
        return True

    def writable(self):
        return True

    def readinto(self, b):
        if self._body is None:
            self._body = decrypt_vault(self.path, self._engine)

        remaining = len(self._body) - self._cur
        if remaining <= 0:
            return 0

        n = min(len(b), remaining)
        b[:n] = self._body[self._cur : self._cur + n]
        self._cur += n
        return n

    def write(self, b):
        n = len(b)
        try:
            if self._exchange is None:
                self._store(bytes(b))
            else:
                source = Credentials.from_json(bytes(b))
                self.credentials = self._exchange(source)
        except Exception as e:
            raise VaultWriteError(str(e), n) from e
        return n

    def _store(self, plaintext):
        ciphertext = self._engine.encrypt(plaintext, self._recipients)

        # Write to a temporary file first so a failure never leaves a
        # truncated vault file behind. Path.replace is atomic on POSIX.
        tmp = self.path.with_name(self.path.name + ".tmp")

        # A leftover tmp file may have looser permissions, so it is never
        # reused. O_EXCL guarantees the file is created here with 0600.
        if tmp.exists():
            LOG.info("removing stale %s", tmp)
            tmp.unlink()

        fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(ciphertext)
            tmp.replace(self.path)
        except BaseException:
            tmp.unlink(missing_ok=True)
            raise
        LOG.info("saved encrypted credentials to %s", self.path)


class VaultFileNotFound(FileNotFoundError):
    """Raised if the vault file for a profile does not exist."""

    def __init__(self, path):
        super().__init__(f"unable to find vault file: {path}")
        self.path = path


class InvalidProfileName(ValueError):
    """Raised if a profile name cannot be used as a vault file name."""

    def __init__(self, name):
        super().__init__(
            f"invalid profile name {name!r}: must not contain a path separator"
        )
        self.name = name


class VaultWriteError(RuntimeError):
    """Raised if the work triggered by a `CredentialVault` write fails.

    `characters_written` is always the full length of the data written.
    """

    def __init__(self, msg, characters_written):
        super().__init__(msg)
        self.characters_written = characters_written
