"""aemgen scaffolder -- composes AEM project and module generators.

A ``ProjectGenerator`` resolves the project-wide properties, validates the
requested modules and composes one ``ModuleGenerator`` per module type.  Each
module resolves its own properties on top of the project's, fetches the
artifact versions it needs and renders its Jinja2 templates.

Quick usage::

    from aemgen.config import Settings
    from aemgen.engine import CompositionEngine

    engine = CompositionEngine(Settings(output_dir=Path("mysite")))
    result = await engine.run_project(
        {"group_id": "com.mysite", "modules": ["app", "tests-it"], "defaults": True}
    )
"""

from aemgen.scaffolder.generator import ProjectGenerator
from aemgen.scaffolder.modules import MODULE_GENERATORS, ModuleGenerator
from aemgen.scaffolder.properties import PropertyBag, PropertyResolver
from aemgen.scaffolder.templates import TemplateRenderer

__all__ = [
    "MODULE_GENERATORS",
    "ModuleGenerator",
    "ProjectGenerator",
    "PropertyBag",
    "PropertyResolver",
    "TemplateRenderer",
]
