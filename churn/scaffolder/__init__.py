"""churn scaffolder -- turns a ``Configuration`` into a project tree.

Quick usage::

    from churn.config import resolve_configuration
    from churn.scaffolder import ProjectGenerator

    config = resolve_configuration({"project_name": "my-api", "testing": "vitest"})
    result = await ProjectGenerator(config).generate(install=False)
    print(result.files)
"""

from churn.scaffolder.contract_gen import ContractGenerator
from churn.scaffolder.docker_gen import DockerGenerator
from churn.scaffolder.generator import ProjectGenerator, ScaffoldResult, ScaffoldStage
from churn.scaffolder.templates import TemplateRenderer

__all__ = [
    "ContractGenerator",
    "DockerGenerator",
    "ProjectGenerator",
    "ScaffoldResult",
    "ScaffoldStage",
    "TemplateRenderer",
]
