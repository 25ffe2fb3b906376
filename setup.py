#!/usr/bin/env python
# -*- encoding: utf-8 -*-
import io
import re
from os.path import dirname, join

from setuptools import find_packages, setup


def read(*names, **kwargs):
    return io.open(
        join(dirname(__file__), *names), encoding=kwargs.get("encoding", "utf8")
    ).read()


def find_version(*file_paths):
    contents = read(*file_paths)
    match = re.search(r"^__version__ = ['\"]([^'\"]*)['\"]", contents, re.M)
    if match:
        return match.group(1)
    raise RuntimeError("Unable to find version string.")


setup(
    name="credvault",
    python_requires=">=3.8",
    version=find_version("src", "credvault", "__init__.py"),
    license="MIT",
    description="AWS credential_process that serves gpg-encrypted credentials",
    long_description="""`credvault` stores long-lived AWS access keys in gpg-encrypted
files, one per profile, and serves them to the AWS CLI and SDKs as a
`credential_process`. When a profile defines a role, the stored keys are
exchanged for temporary credentials via STS AssumeRole, optionally with MFA.""",
    long_description_content_type="text/markdown",
    packages=find_packages("src"),
    package_dir={"": "src"},
    include_package_data=True,
    zip_safe=False,
    classifiers=[
        "Development Status :: 5 - Production/Stable",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: Unix",
        "Operating System :: POSIX",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: Implementation :: CPython",
        "Topic :: Utilities",
    ],
    keywords=["credvault", "aws", "gpg", "credential_process", "cli"],
    install_requires=[
        "boto3>=1.12.39",
        "PyYAML>=3.10",
    ],
    tests_require=["pytest", "pytest-mock", "freezegun"],
    extras_require={"test": ["pytest", "pytest-mock", "freezegun"]},
    entry_points={
        "console_scripts": [
            "credvault = credvault.cli:main",
        ]
    },
)
