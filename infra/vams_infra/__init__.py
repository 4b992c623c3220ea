"""CDK constructs for the VAMS delivery pipeline."""

from vams_infra.config import DeploymentConfig
from vams_infra.pipeline import CodePipelineStack
from vams_infra.stage import CodePipelineStage

__all__ = ["DeploymentConfig", "CodePipelineStack", "CodePipelineStage"]
