from aws_cdk import Aspects
from aws_cdk.assertions import Annotations, Match, Template

from app import create_app
from vams_infra.config import PIPELINE_STACK_ID


def pipeline_resources(app):
    stack = app.node.find_child(PIPELINE_STACK_ID)
    resources = Template.from_stack(stack).to_json()["Resources"]
    return {
        logical_id: (resource["Type"], resource.get("Properties"))
        for logical_id, resource in resources.items()
    }


def test_cdk_nag_disabled_by_default():
    app = create_app()
    assert len(Aspects.of(app).all) == 0


def test_cdk_nag_adds_one_aspect():
    app = create_app(enable_cdk_nag=True)
    assert len(Aspects.of(app).all) == 1


def test_cdk_nag_enabled_from_context():
    app = create_app(context={"enable-cdk-nag": "true"})
    assert len(Aspects.of(app).all) == 1


def test_cdk_nag_disabled_from_context():
    app = create_app(context={"enable-cdk-nag": "false"})
    assert len(Aspects.of(app).all) == 0


def test_cdk_nag_does_not_change_resources():
    assert pipeline_resources(create_app(enable_cdk_nag=True)) == pipeline_resources(
        create_app(enable_cdk_nag=False)
    )


def test_pipeline_stack_targets_fixed_region(deployment_env):
    deployment_env.setenv("AWS_REGION", "ap-southeast-2")
    app = create_app()
    stack = app.node.find_child(PIPELINE_STACK_ID)
    assert stack.region == "eu-west-2"
    assert stack.account == "123456789012"
    assert stack.stage.vams_stack.region == "eu-west-2"
    assert stack.stage.waf_stack.region == "us-east-1"


def test_cdk_nag_clean_on_cross_region_support_stack():
    app = create_app(enable_cdk_nag=True)
    pipeline = app.node.find_child(PIPELINE_STACK_ID).pipeline.pipeline
    support_stacks = [support.stack for support in pipeline.cross_region_support.values()]
    assert support_stacks

    for stack in support_stacks:
        errors = Annotations.from_stack(stack).find_error(
            "*", Match.string_like_regexp("AwsSolutions-S1:.*")
        )
        assert len(errors) == 0, f"Unsuppressed S1 errors found in {stack.stack_name}"
