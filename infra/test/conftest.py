import os
import sys

import pytest

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from constants import ACCOUNT, CONNECTION_ARN, REPO_OWNER

DEPLOYMENT_VARIABLES = [
    "AWS_REGION",
    "CDK_DEFAULT_ACCOUNT",
    "CDK_CONTEXT_JSON",
    "STACK_NAME",
    "DOCKER_DEFAULT_PLATFORM",
    "VAMS_ADMIN_EMAIL",
    "REPO_OWNER",
    "CONNECTION_ARN",
    "STAGING_BUCKET",
    "DEMO_LABEL",
    "DEPLOYMENT_ENV",
]


@pytest.fixture(autouse=True)
def deployment_env(monkeypatch):
    # Start every test from a known environment
    for name in DEPLOYMENT_VARIABLES:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("CDK_DEFAULT_ACCOUNT", ACCOUNT)
    monkeypatch.setenv("CONNECTION_ARN", CONNECTION_ARN)
    monkeypatch.setenv("REPO_OWNER", REPO_OWNER)
    return monkeypatch
