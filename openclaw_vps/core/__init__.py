"""Resource graph construction and the deployment pipeline."""

from openclaw_vps.core.dag import DAG, DAGNode
from openclaw_vps.core.graph import ResourceGraph, ResourceHandle, ResourceSpec
from openclaw_vps.core.deployment import (
    OUTPUT_NAMES,
    Deployment,
    DeploymentOutputs,
    deploy,
)

__all__ = [
    "DAG",
    "DAGNode",
    "ResourceGraph",
    "ResourceHandle",
    "ResourceSpec",
    "OUTPUT_NAMES",
    "Deployment",
    "DeploymentOutputs",
    "deploy",
]
