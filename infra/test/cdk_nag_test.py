import pytest
from aws_cdk import App, Aspects, Environment
from aws_cdk.assertions import Annotations, Match, Template
from cdk_nag import AwsSolutionsChecks

from constants import ACCOUNT
from vams_infra.application import VamsStack
from vams_infra.waf import CfWafStack


def create_waf_stack(app):
    return CfWafStack(
        app,
        "vams-waf-dev",
        stack_name="vams-waf-dev",
        env=Environment(account=ACCOUNT, region="us-east-1"),
    )


def create_vams_stack(app):
    return VamsStack(
        app,
        "vams-dev",
        prod=False,
        stack_name="vams-dev",
        env=Environment(account=ACCOUNT, region="eu-west-2"),
        ssm_waf_arn_parameter_name="/vams-waf-dev/waf-arn",
        ssm_waf_arn_parameter_region="us-east-1",
        ssm_waf_arn="arn:aws:wafv2:us-east-1:123456789012:global/webacl/vams/1234",
    )


def create_test_stack(create_stack):
    app = App()
    stack = create_stack(app)
    Aspects.of(stack).add(AwsSolutionsChecks())
    return stack


@pytest.fixture(
    params=[
        create_waf_stack,
        create_vams_stack,
    ]
)
def test_stack(request):
    return create_test_stack(request.param)


def test_no_unsuppressed_warnings(test_stack):
    warnings = Annotations.from_stack(test_stack).find_warning(
        "*", Match.string_like_regexp("AwsSolutions-.*")
    )
    assert len(warnings) == 0, f"Unsuppressed warnings found in {test_stack.stack_name}"


def test_no_unsuppressed_errors(test_stack):
    errors = Annotations.from_stack(test_stack).find_error(
        "*", Match.string_like_regexp("AwsSolutions-.*")
    )
    assert len(errors) == 0, f"Unsuppressed errors found in {test_stack.stack_name}"


def test_vams_stack_suppressions():
    stack = create_test_stack(create_vams_stack)
    rules = Template.from_stack(stack).to_json()["Metadata"]["cdk_nag"][
        "rules_to_suppress"
    ]
    ids = [rule["id"] for rule in rules]
    for rule_id in ["AwsSolutions-S1", "AwsSolutions-COG3", "AwsSolutions-COG8", "AwsSolutions-L1"]:
        assert rule_id in ids
    assert all(rule["reason"] for rule in rules)
