from .dsl import deploy, sh
from .model import Deploy, RunResult, Step, StepResult
from .runner import DeployError, StepFailure, load_workflow, run_deploy
from .step_workflows.rails import bundle, rails_build, rake

__all__ = [
    "deploy",
    "sh",
    "bundle",
    "rake",
    "rails_build",
    "run_deploy",
    "load_workflow",
    "Deploy",
    "Step",
    "StepResult",
    "RunResult",
    "DeployError",
    "StepFailure",
]
