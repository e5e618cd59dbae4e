"""
Bundler invocation.
Runs ``bun build`` to produce a single minified script from the launcher.
"""
import logging
import os
from typing import List, Optional, Sequence

from elysia_lambda.errors import BundleError, CommandError
from elysia_lambda.process import run_command

logger = logging.getLogger(__name__)

# Provided by the Bun layer at runtime
EXTERNAL_PACKAGES = ("@elysiajs/fn",)


class Bundler:
    """Wraps ``bun build`` with a fixed target, minification and externals."""

    def __init__(
        self,
        executable: str = "bun",
        target: str = "bun",
        external: Sequence[str] = EXTERNAL_PACKAGES,
        timeout: Optional[float] = 300.0,
    ):
        self.executable = executable
        self.target = target
        self.external = tuple(external)
        self.timeout = timeout

    def command(self, entry_path: str, outfile: str) -> List[str]:
        cmd = [
            self.executable, "build", entry_path,
            f"--target={self.target}",
            "--minify",
            f"--outfile={outfile}",
        ]
        for package in self.external:
            cmd.extend(["--external", package])
        return cmd

    def bundle(self, entry_path: str, outfile: str) -> str:
        """
        Bundle ``entry_path`` into ``outfile``.

        Raises:
            BundleError: If bun is missing, times out or exits non-zero
        """
        try:
            run_command(self.command(entry_path, outfile), timeout=self.timeout)
        except CommandError as e:
            if os.path.exists(outfile):
                os.remove(outfile)
            detail = e.output.strip()
            raise BundleError(f"{e}\n{detail}" if detail else str(e)) from e

        if not os.path.exists(outfile):
            raise BundleError(f"Bundler reported success but {outfile} was not written")

        logger.info(f"Bundled {entry_path} into {outfile}")
        return outfile
