"""Project scaffolding on top of the external React Native generator.

Runs ``react-native init``, then lays the bundled helper scripts and
config files over the result and patches the generated files so the project
builds and starts straight away.

Quick usage::

    from rn_bootstrap.scaffolder import ProjectGeneratorInvoker, TemplateCopier

    project_dir = await ProjectGeneratorInvoker(runner).run(context)
    await TemplateCopier().copy_tree("shell", project_dir / "shell")
"""

from rn_bootstrap.scaffolder.copier import TemplateCopier
from rn_bootstrap.scaffolder.dependencies import DependencyAugmenter, PackageManager
from rn_bootstrap.scaffolder.generator import ProjectGeneratorInvoker, ensure_target_absent
from rn_bootstrap.scaffolder.substitution import LiteralRule, PatternRule, apply_rules
from rn_bootstrap.scaffolder.templates import TemplateRenderer

__all__ = [
    "DependencyAugmenter",
    "LiteralRule",
    "PackageManager",
    "PatternRule",
    "ProjectGeneratorInvoker",
    "TemplateCopier",
    "TemplateRenderer",
    "apply_rules",
    "ensure_target_absent",
]
