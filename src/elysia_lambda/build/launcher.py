"""
Launcher generation.

The launcher is the module handed to the bundler. It imports the mutated entry,
which registers the service instance through the hijack plugin, and exports
the instance's request handler for the Lambda runtime.
"""
import logging

from elysia_lambda.build.transformer import REPLACEMENT_TOKEN, TransformResult
from elysia_lambda.errors import InstanceNotFoundError

logger = logging.getLogger(__name__)

PLUGIN_MODULE = "elysia-lambda"

LAUNCHER_TEMPLATE = """
import {{ instance }} from '{plugin}'
import '{entry}' // the entry point import
export default {{
  js: instance().innerHandle
}}"""


def render_launcher(entry_path: str, plugin_module: str = PLUGIN_MODULE) -> str:
    """Return the launcher source for a mutated entry file."""
    entry = entry_path.replace("\\", "/").replace("'", "\\'")
    return LAUNCHER_TEMPLATE.format(plugin=plugin_module, entry=entry)


class LauncherGenerator:
    """Writes the launcher module for a transformed entry."""

    def __init__(self, plugin_module: str = PLUGIN_MODULE):
        self.plugin_module = plugin_module

    def generate(self, transform: TransformResult, out_path: str) -> str:
        """
        Write the launcher for ``transform`` to ``out_path``.

        Raises:
            InstanceNotFoundError: If the mutated entry wires no service instance
        """
        if not transform.rewrites:
            raise InstanceNotFoundError(
                f"Elysia instance not found: the entry never applies the '{REPLACEMENT_TOKEN}' plugin. "
                "Register the service with .use(lambda())."
            )

        with open(out_path, "w", encoding="utf-8") as f:
            f.write(render_launcher(transform.path, self.plugin_module))

        logger.debug(f"Wrote launcher {out_path} for {transform.path}")
        return out_path
