#!/usr/bin/env python3
import os
import aws_cdk as cdk
from aws_cdk import Aspects
from cdk_nag import AwsSolutionsChecks

from vams_infra.config import PIPELINE_REGION, PIPELINE_STACK_ID
from vams_infra.pipeline import CodePipelineStack

# development variables
ENABLE_CDK_NAG = False


def create_app(enable_cdk_nag=None, context=None):
    app = cdk.App(context=context)

    if enable_cdk_nag is None:
        context_flag = app.node.try_get_context("enable-cdk-nag")
        enable_cdk_nag = (
            ENABLE_CDK_NAG if context_flag is None else str(context_flag).lower() == "true"
        )
    if enable_cdk_nag:
        Aspects.of(app).add(AwsSolutionsChecks(verbose=True))

    print(f"Pipeline {PIPELINE_STACK_ID} 👉 {PIPELINE_REGION} (cdk-nag: {bool(enable_cdk_nag)})")

    CodePipelineStack(
        app,
        PIPELINE_STACK_ID,
        env=cdk.Environment(
            account=os.environ.get("CDK_DEFAULT_ACCOUNT"),
            region=PIPELINE_REGION,
        ),
    )
    return app


if __name__ == "__main__":
    create_app().synth()
