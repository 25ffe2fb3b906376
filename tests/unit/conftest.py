#
# Copyright 2019 FMR LLC <opensource@fidelity.com>
#
# SPDX-License-Identifier: MIT
#

# pylint: disable=redefined-outer-name,missing-docstring

import pytest

# Stand-ins for the gpg executable. "Encryption" is the identity function, so
# vault files written by the tests contain plain JSON.
PASSTHROUGH_GPG = """#!/bin/sh
echo "gpg: called with $*" >&2
case "$1" in
    --decrypt|--encrypt) exec cat ;;
esac
echo "gpg: unsupported command $1" >&2
exit 2
"""

FAILING_GPG = """#!/bin/sh
cat > /dev/null
echo "gpg: decryption failed: No secret key" >&2
exit 2
"""


def _script(path, text):
    path.write_text(text)
    path.chmod(0o755)
    return str(path)


@pytest.fixture
def fake_gpg(tmp_path):
    return _script(tmp_path / "gpg", PASSTHROUGH_GPG)


@pytest.fixture
def failing_gpg(tmp_path):
    return _script(tmp_path / "gpg-fail", FAILING_GPG)


@pytest.fixture
def home(tmp_path, monkeypatch):
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for var in (
        "AWS_PROFILE",
        "AWS_DEFAULT_PROFILE",
        "AWS_CONFIG_FILE",
        "CREDVAULT_CONFIG",
        "CREDVAULT_TRACE",
    ):
        monkeypatch.delenv(var, raising=False)
    return home


@pytest.fixture
def aws_config(home):
    path = home / ".aws" / "config"
    path.parent.mkdir(parents=True, exist_ok=True)

    def write(text):
        path.write_text(text)
        return path

    return write


@pytest.fixture
def vault_file(home):
    vault = home / ".aws" / "creds-vault"
    vault.mkdir(parents=True, exist_ok=True)

    def write(profile, text):
        path = vault / profile
        path.write_text(text)
        return path

    return write
