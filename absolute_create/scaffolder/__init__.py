"""absolute-create scaffolder -- renders an AbsoluteJS project from a configuration.

This module takes a resolved ``Configuration`` and produces the generated
project files: ``package.json``, the Elysia server entry point, database
handlers and schema, the database compose file, ``.env`` and the auth
utility.

Quick usage::

    from absolute_create.resolver import resolve
    from absolute_create.models import RawConfiguration
    from absolute_create.scaffolder import ProjectGenerator

    resolution = resolve(RawConfiguration(project_name="my-app", frontends=["react"]))
    generator = ProjectGenerator(resolution.configuration)
    project = await generator.generate("/tmp/output")
"""

from absolute_create.scaffolder.generator import GeneratedProject, ProjectGenerator
from absolute_create.scaffolder.templates import TemplateRenderer

__all__ = [
    "GeneratedProject",
    "ProjectGenerator",
    "TemplateRenderer",
]
