#
# Copyright 2019 FMR LLC <opensource@fidelity.com>
#
# SPDX-License-Identifier: MIT
#

# pylint: disable=redefined-outer-name,missing-docstring

import pytest

from credvault.awsconfig import (
    DEFAULT_SESSION_NAME,
    ConfigFileNotFound,
    ProfileConfig,
    config_file_path,
    load_profile_config,
)
from credvault.credentials import Credentials

CONFIG = """
[default]
region = us-east-1

[profile dev]
credential_process = credvault dev
role_arn = arn:aws:iam::111222333444:role/Developer
role_session_name = pete
external_id = 12345
mfa_serial = arn:aws:iam::111222333444:mfa/pete

[profile plain]
credential_process = credvault plain

[legacy]
role_arn = arn:aws:iam::111222333444:role/Legacy
"""


@pytest.fixture
def config_path(aws_config):
    return aws_config(CONFIG)


def test_load_full_profile(config_path):
    cfg = load_profile_config("dev")
    assert cfg.profile == "dev"
    assert cfg.role_arn == "arn:aws:iam::111222333444:role/Developer"
    assert cfg.session_name == "pete"
    assert cfg.external_id == "12345"
    assert cfg.mfa_serial == "arn:aws:iam::111222333444:mfa/pete"
    assert cfg.source is None
    assert cfg.config_file == config_path


def test_load_profile_without_role(config_path):
    cfg = load_profile_config("plain")
    assert cfg.role_arn == ""
    assert cfg.session_name == DEFAULT_SESSION_NAME
    assert cfg.external_id == ""
    assert cfg.mfa_serial == ""


def test_load_section_without_profile_prefix(config_path):
    assert load_profile_config("legacy").role_arn.endswith(":role/Legacy")


def test_load_missing_section(config_path):
    cfg = load_profile_config("missing")
    assert cfg.role_arn == ""
    assert cfg.session_name == DEFAULT_SESSION_NAME


def test_load_missing_file(home):
    with pytest.raises(ConfigFileNotFound):
        load_profile_config("dev")


def test_load_malformed_file(aws_config):
    aws_config("role_arn = no section header\n")
    with pytest.raises(ConfigFileNotFound):
        load_profile_config("dev")


def test_config_file_argument(home, tmp_path):
    path = tmp_path / "other-config"
    path.write_text("[profile dev]\nrole_arn = arn:aws:iam::123:role/X\n")
    cfg = load_profile_config("dev", config_file=path)
    assert cfg.role_arn == "arn:aws:iam::123:role/X"
    assert cfg.config_file == path


def test_config_file_path_from_environment(home, tmp_path):
    path = tmp_path / "env-config"
    assert config_file_path({"AWS_CONFIG_FILE": str(path)}) == path
    assert config_file_path({}) == home / ".aws" / "config"


def test_config_file_from_environment(home, tmp_path, monkeypatch):
    path = tmp_path / "env-config"
    path.write_text("[profile dev]\nrole_arn = arn:aws:iam::123:role/Env\n")
    monkeypatch.setenv("AWS_CONFIG_FILE", str(path))
    assert load_profile_config("dev").role_arn == "arn:aws:iam::123:role/Env"


def test_with_source_returns_copy():
    cfg = ProfileConfig("dev", role_arn="arn:aws:iam::123:role/X")
    creds = Credentials("AKIA", "abc")
    bound = cfg.with_source(creds)
    assert bound is not cfg
    assert bound.source is creds
    assert cfg.source is None
    assert bound.role_arn == cfg.role_arn
    assert bound.session_name == DEFAULT_SESSION_NAME
    assert bound.config_file == cfg.config_file
