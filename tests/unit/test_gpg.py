#
# Copyright 2019 FMR LLC <opensource@fidelity.com>
#
# SPDX-License-Identifier: MIT
#

# pylint: disable=redefined-outer-name,missing-docstring

import stat
import sys

import pytest

from credvault.gpg import GPG, EngineError, EngineNotFound, open_engine_log
from credvault.vault import ensure_vault_dir

pytestmark = pytest.mark.skipif(
    sys.platform == "win32", reason="fake gpg is a shell script"
)


def test_engine_not_found(mocker):
    mocker.patch("credvault.gpg.shutil.which", return_value=None)
    with pytest.raises(EngineNotFound):
        GPG()


def test_engine_found_in_path(mocker):
    which = mocker.patch("credvault.gpg.shutil.which", return_value="/usr/bin/gpg")
    assert GPG().path == "/usr/bin/gpg"
    which.assert_called_once_with("gpg")


def test_decrypt(fake_gpg):
    assert GPG(path=fake_gpg).decrypt(b'{"AccessKeyId": "AKIA"}') == (
        b'{"AccessKeyId": "AKIA"}'
    )


def test_decrypt_preserves_binary(fake_gpg):
    data = bytes(range(256)) * 4
    assert GPG(path=fake_gpg).decrypt(data) == data


def test_arguments(fake_gpg, tmp_path):
    log = tmp_path / "engine.log"
    with log.open("wb") as stderr:
        gpg = GPG(path=fake_gpg, args=["--quiet", "--batch"], stderr=stderr)
        gpg.decrypt(b"data")
        gpg.encrypt(b"data", ["pete@example.com", "ops@example.com"])

    lines = log.read_text().splitlines()
    assert lines == [
        "gpg: called with --decrypt --quiet --batch",
        "gpg: called with --encrypt --recipient pete@example.com "
        "--recipient ops@example.com --quiet --batch",
    ]


def test_non_zero_exit(failing_gpg):
    with pytest.raises(EngineError) as e:
        GPG(path=failing_gpg).decrypt(b"data")

    assert e.value.returncode == 2
    assert "No secret key" in e.value.diagnostics
    assert "No secret key" in str(e.value)


def test_non_zero_exit_with_log(failing_gpg, tmp_path):
    log = tmp_path / "engine.log"
    with log.open("wb") as stderr:
        with pytest.raises(EngineError) as e:
            GPG(path=failing_gpg, stderr=stderr).decrypt(b"data")

    assert e.value.returncode == 2
    assert e.value.diagnostics == ""
    assert "No secret key" in log.read_text()


def test_open_engine_log(home):
    ensure_vault_dir()
    with open_engine_log() as f:
        f.write(b"first\n")
    with open_engine_log() as f:
        f.write(b"second\n")

    path = home / ".aws" / "creds-vault" / "vault.log"
    assert path.read_text() == "first\nsecond\n"
    assert stat.S_IMODE(path.stat().st_mode) & 0o137 == 0
