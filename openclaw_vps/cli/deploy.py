"""
Thin wrapper around the ``pulumi`` CLI for the openclaw-vps project.

The Pulumi engine owns reconciliation, ordering and retries; these helpers
only run its commands from the project directory and surface failures.
"""

import json
import logging
import subprocess
from pathlib import Path
from typing import Any

from openclaw_vps.errors import OpenClawError

logger = logging.getLogger(__name__)


class PulumiCommandError(OpenClawError):
    """Raised when a pulumi CLI command fails."""
    pass


class PulumiCLI:
    """
    Runs Pulumi commands against the project.

    Example:
        cli = PulumiCLI(project_dir=".", stack="dev")
        cli.preview()
        cli.up(yes=True)
        cli.stack_output()  # {"asgName": ..., "volumeId": ...}
    """

    def __init__(
        self,
        project_dir: str | Path = ".",
        stack: str | None = None,
        executable: str = "pulumi",
    ):
        """
        Args:
            project_dir: Directory containing ``Pulumi.yaml``
            stack: Optional stack name
            executable: Pulumi binary to invoke
        """
        self.project_dir = Path(project_dir)
        self.stack = stack
        self.executable = executable

    def preview(self) -> subprocess.CompletedProcess:
        """Run 'pulumi preview' to show the planned changes."""
        return self._run(["preview"], capture=False)

    def up(self, yes: bool = False) -> subprocess.CompletedProcess:
        """
        Run 'pulumi up' to create or update the deployment.

        Args:
            yes: Skip the confirmation prompt
        """
        extra_args = ["--yes"] if yes else []
        return self._run(["up", *extra_args], capture=False)

    def destroy(self, yes: bool = False) -> subprocess.CompletedProcess:
        """
        Run 'pulumi destroy' to tear the deployment down.

        The data volume is destroyed with everything else; take a snapshot
        first if its contents should survive.
        """
        extra_args = ["--yes"] if yes else []
        return self._run(["destroy", *extra_args], capture=False)

    def stack_output(self) -> dict[str, Any]:
        """
        Get stack outputs as a dictionary.

        Raises:
            PulumiCommandError: If the command fails or prints invalid JSON
        """
        result = self._run(["stack", "output", "--json"], capture=True)
        try:
            return json.loads(result.stdout or "{}")
        except json.JSONDecodeError as e:
            raise PulumiCommandError(f"Failed to parse stack outputs: {e}") from e

    def build_command(self, args: list[str]) -> list[str]:
        cmd = [self.executable, *args]
        if self.stack:
            cmd.extend(["--stack", self.stack])
        return cmd

    def _run(self, args: list[str], capture: bool) -> subprocess.CompletedProcess:
        """
        Run a Pulumi command from the project directory.

        Raises:
            PulumiCommandError: If the directory is missing, the binary is
                not installed, or the command exits non-zero
        """
        if not self.project_dir.is_dir():
            raise PulumiCommandError(f"Pulumi project directory not found: {self.project_dir}")

        cmd = self.build_command(args)
        logger.info("Running %s in %s", " ".join(cmd), self.project_dir)

        try:
            return subprocess.run(
                cmd,
                cwd=self.project_dir,
                check=True,
                capture_output=capture,
                text=True,
            )
        except FileNotFoundError as e:
            raise PulumiCommandError(
                f"'{self.executable}' not found. Install the Pulumi CLI: https://www.pulumi.com/docs/install/"
            ) from e
        except subprocess.CalledProcessError as e:
            error_msg = f"Pulumi command failed: {' '.join(cmd)}"
            if e.stderr:
                error_msg += f"\n{e.stderr}"
            raise PulumiCommandError(error_msg) from e
