"""churn -- scaffold Node backends and Solidity projects from a handful of choices.

Quick usage::

    from churn.config import resolve_configuration
    from churn.scaffolder import ProjectGenerator

    config = resolve_configuration({"project_name": "my-api", "orm": "drizzle"})
    result = await ProjectGenerator(config).generate()
"""

__version__ = "1.0.0"
