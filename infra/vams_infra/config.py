"""
Deployment configuration for the VAMS pipeline.

Every value is read once, environment variable first and CDK context second,
and then handed down to the pipeline, the stage and the stacks.
"""

import os
from dataclasses import dataclass, replace
from typing import Dict, Mapping, Optional

from aws_cdk import aws_codebuild as codebuild
from constructs import Construct

PIPELINE_STACK_ID = "vams-code-pipeline-stack"
PIPELINE_NAME = "VamsPipeline"
PIPELINE_REGION = "eu-west-2"
DEFAULT_REGION = "us-east-1"
# CloudFront web ACLs can only be created in us-east-1
WAF_REGION = "us-east-1"
REPOSITORY_NAME = "visual-asset-management-system"
SOURCE_BRANCH = "main"
DEFAULT_DOCKER_PLATFORM = "linux/amd64"
DEFAULT_LABEL = "dev"


@dataclass(frozen=True)
class DeploymentConfig:
    account: Optional[str]
    region: str
    stack_name: Optional[str] = None
    docker_default_platform: str = DEFAULT_DOCKER_PLATFORM
    admin_email: Optional[str] = None
    repo_owner: Optional[str] = None
    connection_arn: Optional[str] = None
    staging_bucket: Optional[str] = None
    demo_label: Optional[str] = None
    deployment_env: Optional[str] = None

    @classmethod
    def resolve(
        cls,
        scope: Construct,
        region: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "DeploymentConfig":
        environ = os.environ if environ is None else environ

        def lookup(env_var, context_key=None, default=None):
            value = environ.get(env_var)
            if not value and context_key:
                value = scope.node.try_get_context(context_key)
            return value or default

        return cls(
            account=environ.get("CDK_DEFAULT_ACCOUNT"),
            region=region
            or scope.node.try_get_context("region")
            or environ.get("AWS_REGION")
            or DEFAULT_REGION,
            stack_name=lookup("STACK_NAME", "stack-name"),
            docker_default_platform=lookup(
                "DOCKER_DEFAULT_PLATFORM", default=DEFAULT_DOCKER_PLATFORM
            ),
            admin_email=lookup("VAMS_ADMIN_EMAIL", "adminEmailAddress"),
            repo_owner=lookup("REPO_OWNER", "repo-owner"),
            connection_arn=lookup("CONNECTION_ARN", "connection-arn"),
            staging_bucket=lookup("STAGING_BUCKET", "staging-bucket"),
            demo_label=lookup("DEMO_LABEL"),
            deployment_env=lookup("DEPLOYMENT_ENV"),
        )

    def for_region(self, region: str) -> "DeploymentConfig":
        """Same configuration retargeted at another region."""
        return replace(self, region=region)

    @property
    def repository(self) -> str:
        # Not validated: an unset owner gives "None/visual-asset-management-system"
        return f"{self.repo_owner}/{REPOSITORY_NAME}"

    @property
    def stack_label(self) -> Optional[str]:
        if not self.stack_name:
            return None
        return f"{self.stack_name}-{self.region}"

    @property
    def construct_label(self) -> str:
        return self.stack_label or self.demo_label or DEFAULT_LABEL

    @property
    def deployment_label(self) -> str:
        return self.stack_label or self.deployment_env or DEFAULT_LABEL

    @property
    def waf_stack_id(self) -> str:
        return f"vams-waf-{self.construct_label}"

    @property
    def waf_stack_name(self) -> str:
        return f"vams-waf-{self.deployment_label}"

    @property
    def vams_stack_id(self) -> str:
        return f"vams-{self.construct_label}"

    @property
    def vams_stack_name(self) -> str:
        return f"vams-{self.deployment_label}"

    def synth_environment(self) -> Dict[str, str]:
        """Environment passed to the synth step. Unset values are left out."""
        env = {
            "DOCKER_DEFAULT_PLATFORM": self.docker_default_platform,
            "STACK_NAME": self.stack_name,
            "VAMS_ADMIN_EMAIL": self.admin_email,
            "CONNECTION_ARN": self.connection_arn,
            "REPO_OWNER": self.repo_owner,
        }
        return {key: value for key, value in env.items() if value is not None}

    def self_mutation_environment(
        self,
    ) -> Dict[str, codebuild.BuildEnvironmentVariable]:
        env = {
            "CONNECTION_ARN": self.connection_arn,
            "REPO_OWNER": self.repo_owner,
        }
        return {
            key: codebuild.BuildEnvironmentVariable(
                type=codebuild.BuildEnvironmentVariableType.PLAINTEXT,
                value=value,
            )
            for key, value in env.items()
            if value is not None
        }
