from typing import Optional

from aws_cdk import (
    Stack,
    aws_cloudfront as cloudfront,
    aws_cloudfront_origins as origins,
    aws_cognito as cognito,
    aws_s3 as s3,
    custom_resources as cr,
    RemovalPolicy,
    CfnOutput,
)
from cdk_nag import NagSuppressions
from constructs import Construct


class VamsStack(Stack):
    """
    Main VAMS application stack: storage, web front end and user pool.

    The web front end sits behind the CloudFront web ACL created by
    ``CfWafStack``. When this stack lives outside the firewall region the ACL
    ARN is read back from the SSM parameter the firewall stack publishes.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        prod: bool,
        ssm_waf_arn_parameter_name: str,
        ssm_waf_arn_parameter_region: str,
        ssm_waf_arn: str,
        staging_bucket: Optional[str] = None,
        admin_email: Optional[str] = None,
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        removal_policy = RemovalPolicy.RETAIN if prod else RemovalPolicy.DESTROY

        # Server access logs for the buckets below
        access_logs_bucket = s3.Bucket(
            self,
            "AccessLogsBucket",
            encryption=s3.BucketEncryption.S3_MANAGED,
            block_public_access=s3.BlockPublicAccess.BLOCK_ALL,
            enforce_ssl=True,
            removal_policy=removal_policy,
        )

        self.assets_bucket = s3.Bucket(
            self,
            "AssetsBucket",
            encryption=s3.BucketEncryption.S3_MANAGED,
            block_public_access=s3.BlockPublicAccess.BLOCK_ALL,
            enforce_ssl=True,
            versioned=True,
            server_access_logs_bucket=access_logs_bucket,
            server_access_logs_prefix="assets/",
            removal_policy=removal_policy,
        )

        web_app_bucket = s3.Bucket(
            self,
            "WebAppBucket",
            encryption=s3.BucketEncryption.S3_MANAGED,
            block_public_access=s3.BlockPublicAccess.BLOCK_ALL,
            enforce_ssl=True,
            server_access_logs_bucket=access_logs_bucket,
            server_access_logs_prefix="web-app/",
            removal_policy=removal_policy,
        )

        # Resolve the web ACL ARN
        if self.region == ssm_waf_arn_parameter_region:
            self.waf_arn = ssm_waf_arn
        else:
            parameter_arn = (
                f"arn:aws:ssm:{ssm_waf_arn_parameter_region}:{self.account}"
                f":parameter{ssm_waf_arn_parameter_name}"
            )
            get_waf_arn = cr.AwsSdkCall(
                service="SSM",
                action="getParameter",
                parameters={"Name": ssm_waf_arn_parameter_name},
                region=ssm_waf_arn_parameter_region,
                physical_resource_id=cr.PhysicalResourceId.of(
                    ssm_waf_arn_parameter_name
                ),
            )
            waf_arn_reader = cr.AwsCustomResource(
                self,
                "WafArnReader",
                on_create=get_waf_arn,
                on_update=get_waf_arn,
                policy=cr.AwsCustomResourcePolicy.from_sdk_calls(
                    resources=[parameter_arn]
                ),
                install_latest_aws_sdk=False,
            )
            self.waf_arn = waf_arn_reader.get_response_field("Parameter.Value")

        self.distribution = cloudfront.Distribution(
            self,
            "WebAppDistribution",
            default_behavior=cloudfront.BehaviorOptions(
                origin=origins.S3BucketOrigin.with_origin_access_control(
                    web_app_bucket
                ),
                viewer_protocol_policy=cloudfront.ViewerProtocolPolicy.REDIRECT_TO_HTTPS,
            ),
            default_root_object="index.html",
            # Single page app, let the client router handle unknown paths
            error_responses=[
                cloudfront.ErrorResponse(
                    http_status=status,
                    response_http_status=200,
                    response_page_path="/index.html",
                )
                for status in (403, 404)
            ],
            web_acl_id=self.waf_arn,
        )

        self.user_pool = cognito.UserPool(
            self,
            "UserPool",
            self_sign_up_enabled=False,
            sign_in_aliases=cognito.SignInAliases(email=True),
            auto_verify=cognito.AutoVerifiedAttrs(email=True),
            password_policy=cognito.PasswordPolicy(
                min_length=8,
                require_digits=True,
                require_lowercase=True,
                require_uppercase=True,
                require_symbols=True,
            ),
            account_recovery=cognito.AccountRecovery.EMAIL_ONLY,
            deletion_protection=prod,
            removal_policy=removal_policy,
        )

        admin_group = cognito.CfnUserPoolGroup(
            self,
            "AdminGroup",
            user_pool_id=self.user_pool.user_pool_id,
            group_name="super-admin",
            description="VAMS administrators",
        )

        if admin_email:
            admin_user = cognito.CfnUserPoolUser(
                self,
                "AdminUser",
                user_pool_id=self.user_pool.user_pool_id,
                username=admin_email,
                user_attributes=[
                    cognito.CfnUserPoolUser.AttributeTypeProperty(
                        name="email", value=admin_email
                    ),
                    cognito.CfnUserPoolUser.AttributeTypeProperty(
                        name="email_verified", value="true"
                    ),
                ],
                desired_delivery_mediums=["EMAIL"],
            )
            attachment = cognito.CfnUserPoolUserToGroupAttachment(
                self,
                "AdminGroupAttachment",
                user_pool_id=self.user_pool.user_pool_id,
                group_name=admin_group.group_name,
                username=admin_email,
            )
            attachment.add_dependency(admin_user)
            attachment.add_dependency(admin_group)

        # Pre-existing bucket holding assets from an earlier deployment
        self.staging_bucket = None
        if staging_bucket:
            self.staging_bucket = s3.Bucket.from_bucket_name(
                self, "StagingBucket", staging_bucket
            )
            CfnOutput(
                self,
                "StagingBucketName",
                value=self.staging_bucket.bucket_name,
            )

        CfnOutput(
            self,
            "WebAppUrl",
            value=f"https://{self.distribution.distribution_domain_name}",
        )
        CfnOutput(
            self,
            "AssetsBucketName",
            value=self.assets_bucket.bucket_name,
        )
        CfnOutput(
            self,
            "UserPoolId",
            value=self.user_pool.user_pool_id,
        )

        NagSuppressions.add_stack_suppressions(
            self,
            [
                {
                    "id": "AwsSolutions-S1",
                    "reason": "The access logs bucket is the server access logging target and does not log to itself.",
                },
                {
                    "id": "AwsSolutions-COG2",
                    "reason": "MFA is left to the identity provider configuration of each deployment.",
                },
                {
                    "id": "AwsSolutions-COG3",
                    "reason": "Cognito advanced security is an additional paid feature and is not enabled for pre-production.",
                },
                {
                    "id": "AwsSolutions-COG8",
                    "reason": "The pre-production user pool stays on the Essentials feature plan, the Plus threat protection features are not used.",
                },
                {
                    "id": "AwsSolutions-CFR1",
                    "reason": "VAMS is served globally, geo restrictions are not required.",
                },
                {
                    "id": "AwsSolutions-CFR3",
                    "reason": "Requests are logged and sampled by the web ACL in front of the distribution.",
                },
                {
                    "id": "AwsSolutions-CFR4",
                    "reason": "The distribution uses the default CloudFront domain and certificate.",
                },
                {
                    "id": "AwsSolutions-IAM4",
                    "reason": "The custom resource provider function uses the AWS managed basic execution role.",
                },
                {
                    "id": "AwsSolutions-IAM5",
                    "reason": "Wildcards are generated by CDK grants scoped to the buckets of this stack.",
                },
                {
                    "id": "AwsSolutions-L1",
                    "reason": "The custom resource provider function runtime is managed by CDK.",
                },
            ],
        )
