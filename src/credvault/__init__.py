#
# Copyright 2019 FMR LLC <opensource@fmr.com>
#
# SPDX-License-Identifier: MIT
#
"""CLI and library to serve gpg-encrypted AWS credentials to the AWS CLI.

## Overview

`credvault` keeps long-lived AWS access keys out of the plaintext
`~/.aws/credentials` file. Each profile's keys are stored as a small JSON
document encrypted with gpg under `~/.aws/creds-vault/<profile>`. When the AWS
CLI or an SDK needs credentials, it runs `credvault` as a `credential_process`,
which decrypts the vault file, optionally assumes a role via STS, and prints
the credentials in the JSON shape the AWS CLI expects:

    [profile dev]
    credential_process = credvault dev
    role_arn = arn:aws:iam::111222333444:role/Developer
    mfa_serial = arn:aws:iam::111222333444:mfa/pete

### CLI Usage

The CLI is documented on the `credvault.cli` page. It includes instructions on
importing credentials into the vault as well as the syntax of the optional
configuration file.

### Library Usage

The package can be used without the CLI. Of particular interest to library
users will be the following submodules:

`credvault.pipeline`
: The decrypt, parse, and exchange sequence as plain functions. Start with
`credvault.pipeline.fetch_credentials`.

`credvault.vault`
: The location of vault files and `credvault.vault.CredentialVault`, a file-like
object that reads the decrypted contents of a vault file.

`credvault.sts`
: `credvault.sts.AssumeRoleExchanger`, which trades static credentials for
temporary credentials using the role settings from the AWS config file.
"""

name = "credvault"
__version__ = "1.0.0"
