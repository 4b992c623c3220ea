from typing import Optional

import aws_cdk as cdk
from aws_cdk import (
    Stack,
    Token,
    aws_codebuild as codebuild,
    pipelines,
)
from cdk_nag import NagSuppressions
from constructs import Construct

from vams_infra.config import (
    DEFAULT_REGION,
    PIPELINE_NAME,
    SOURCE_BRANCH,
    DeploymentConfig,
)
from vams_infra.stage import CodePipelineStage


class CodePipelineStack(Stack):
    """
    The stack that defines the application pipeline.

    Every change on the source branch installs, builds and tests the web
    project and this CDK project, synthesizes the cloud assembly, updates the
    pipeline itself and then deploys the ``preProd`` stage.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        config: Optional[DeploymentConfig] = None,
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        region = DEFAULT_REGION if Token.is_unresolved(self.region) else self.region
        if config is None:
            config = DeploymentConfig.resolve(self, region=region)
        self.config = config

        self.pipeline = pipelines.CodePipeline(
            self,
            "Pipeline",
            pipeline_name=PIPELINE_NAME,
            # How it will be built and synthesized
            synth=pipelines.ShellStep(
                "Synth",
                # Connection created beforehand in the AWS console
                input=pipelines.CodePipelineSource.connection(
                    config.repository,
                    SOURCE_BRANCH,
                    connection_arn=config.connection_arn,
                ),
                env=config.synth_environment(),
                install_commands=[
                    "cd web",
                    "yarn install",
                    "npm run build",
                    "npm run test",
                ],
                # Install dependencies, run tests and synthesize
                commands=[
                    "cd ../infra",
                    "npm install -g aws-cdk",
                    'pip install -e "..[test]"',
                    "pytest",
                    "cdk synth",
                ],
                primary_output_directory="infra/cdk.out",
            ),
            code_build_defaults=pipelines.CodeBuildOptions(
                build_environment=codebuild.BuildEnvironment(
                    compute_type=codebuild.ComputeType.MEDIUM,
                ),
            ),
            self_mutation=True,
            self_mutation_code_build_defaults=pipelines.CodeBuildOptions(
                build_environment=codebuild.BuildEnvironment(
                    environment_variables=config.self_mutation_environment(),
                ),
                partial_build_spec=codebuild.BuildSpec.from_object(
                    {
                        "version": "0.2",
                        "phases": {
                            "build": {
                                "commands": [
                                    f"cdk -a . deploy {self.stack_name} --require-approval=never --verbose --context repo-owner={config.repo_owner}"
                                ]
                            }
                        },
                    }
                ),
            ),
        )

        # preProd deploys the WAF and VAMS stacks
        self.stage = CodePipelineStage(
            self,
            "preProd",
            config=config,
            env=cdk.Environment(account=config.account, region=region),
        )
        self.pipeline.add_stage(self.stage)

        # Building the pipeline lets cdk-nag see the resources it creates
        self.pipeline.build_pipeline()

        NagSuppressions.add_resource_suppressions_by_path(
            self,
            f"/{self.node.path}/Pipeline/Pipeline/ArtifactsBucket/Resource",
            [
                {
                    "id": "AwsSolutions-S1",
                    "reason": "Planning to use the artifacts bucket as is right now. Can be customized with the artifact_bucket prop if required.",
                },
            ],
        )

        # Replication buckets of the cross-region support stacks (us-east-1 for the WAF)
        for support in self.pipeline.pipeline.cross_region_support.values():
            NagSuppressions.add_resource_suppressions(
                support.replication_bucket,
                [
                    {
                        "id": "AwsSolutions-S1",
                        "reason": "Cross-region replication bucket managed by CodePipeline, it only holds pipeline artifacts.",
                    },
                ],
                apply_to_children=True,
            )

        NagSuppressions.add_stack_suppressions(
            self,
            [
                {
                    "id": "AwsSolutions-IAM5",
                    "reason": "Service roles created with default permissions by CDK Pipelines with required permissions. Can be customized with the role prop.",
                },
                {
                    "id": "AwsSolutions-CB4",
                    "reason": "Using default settings from CodePipeline. CodeBuild projects use the KMS encryption of the artifacts bucket by default.",
                },
            ],
        )
