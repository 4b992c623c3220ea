from aws_cdk import (
    Stack,
    aws_ssm as ssm,
    aws_wafv2 as wafv2,
    CfnOutput,
)
from constructs import Construct

MANAGED_RULE_GROUPS = [
    "AWSManagedRulesCommonRuleSet",
    "AWSManagedRulesKnownBadInputsRuleSet",
    "AWSManagedRulesAmazonIpReputationList",
]
RATE_LIMIT_PER_IP = 2000


def _visibility(metric_name: str) -> wafv2.CfnWebACL.VisibilityConfigProperty:
    return wafv2.CfnWebACL.VisibilityConfigProperty(
        cloud_watch_metrics_enabled=True,
        metric_name=metric_name,
        sampled_requests_enabled=True,
    )


class CfWafStack(Stack):
    """
    Web application firewall for the VAMS CloudFront distribution.

    CloudFront scoped web ACLs only exist in us-east-1, so this stack is always
    deployed there. The ACL ARN is published to SSM so stacks in other regions
    can read it.
    """

    def __init__(self, scope: Construct, construct_id: str, **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)

        # AWS managed rule groups, evaluated in order
        rules = [
            wafv2.CfnWebACL.RuleProperty(
                name=rule_group,
                priority=priority,
                override_action=wafv2.CfnWebACL.OverrideActionProperty(none={}),
                statement=wafv2.CfnWebACL.StatementProperty(
                    managed_rule_group_statement=wafv2.CfnWebACL.ManagedRuleGroupStatementProperty(
                        vendor_name="AWS",
                        name=rule_group,
                    )
                ),
                visibility_config=_visibility(rule_group),
            )
            for priority, rule_group in enumerate(MANAGED_RULE_GROUPS)
        ]

        # Throttle single clients hammering the distribution
        rules.append(
            wafv2.CfnWebACL.RuleProperty(
                name="RateLimitPerIp",
                priority=len(MANAGED_RULE_GROUPS),
                action=wafv2.CfnWebACL.RuleActionProperty(
                    block=wafv2.CfnWebACL.BlockActionProperty()
                ),
                statement=wafv2.CfnWebACL.StatementProperty(
                    rate_based_statement=wafv2.CfnWebACL.RateBasedStatementProperty(
                        limit=RATE_LIMIT_PER_IP,
                        aggregate_key_type="IP",
                    )
                ),
                visibility_config=_visibility("RateLimitPerIp"),
            )
        )

        web_acl = wafv2.CfnWebACL(
            self,
            "WebAcl",
            scope="CLOUDFRONT",
            default_action=wafv2.CfnWebACL.DefaultActionProperty(
                allow=wafv2.CfnWebACL.AllowActionProperty()
            ),
            visibility_config=_visibility(f"{self.stack_name}-web-acl"),
            rules=rules,
        )

        self.waf_arn = web_acl.attr_arn
        self.ssm_waf_arn_parameter_name = f"/{self.stack_name}/waf-arn"

        # Publish the ACL ARN for the application stack
        ssm.StringParameter(
            self,
            "WafArnParameter",
            parameter_name=self.ssm_waf_arn_parameter_name,
            string_value=self.waf_arn,
            description="ARN of the CloudFront web ACL protecting VAMS",
        )

        CfnOutput(
            self,
            "WafArn",
            value=self.waf_arn,
        )
        CfnOutput(
            self,
            "WafArnParameterName",
            value=self.ssm_waf_arn_parameter_name,
        )
