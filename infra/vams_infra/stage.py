from typing import Optional

import aws_cdk as cdk
from constructs import Construct

from vams_infra.application import VamsStack
from vams_infra.config import WAF_REGION, DEFAULT_REGION, DeploymentConfig
from vams_infra.waf import CfWafStack


class CodePipelineStage(cdk.Stage):
    """
    Deployable unit of the VAMS web service: firewall stack plus application stack.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        config: Optional[DeploymentConfig] = None,
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        region = self.region or self.node.try_get_context("region") or DEFAULT_REGION
        if config is None:
            config = DeploymentConfig.resolve(self, region=region)
        else:
            config = config.for_region(region)
        self.config = config

        print("STACK_NAME 👉", config.stack_label)
        print("REGION 👉", config.region)
        print("DOCKER_DEFAULT_PLATFORM 👉", config.docker_default_platform)
        if config.staging_bucket:
            print("STAGING_BUCKET 👉", config.staging_bucket)

        # The web access firewall currently needs to be in us-east-1
        self.waf_stack = CfWafStack(
            self,
            config.waf_stack_id,
            stack_name=config.waf_stack_name,
            env=cdk.Environment(account=config.account, region=WAF_REGION),
        )

        self.vams_stack = VamsStack(
            self,
            config.vams_stack_id,
            prod=False,
            stack_name=config.vams_stack_name,
            env=cdk.Environment(account=config.account, region=config.region),
            ssm_waf_arn_parameter_name=self.waf_stack.ssm_waf_arn_parameter_name,
            ssm_waf_arn_parameter_region=self.waf_stack.region,
            ssm_waf_arn=self.waf_stack.waf_arn,
            staging_bucket=config.staging_bucket,
            admin_email=config.admin_email,
        )

        self.vams_stack.add_stack_dependency(self.waf_stack)
