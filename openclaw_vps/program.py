"""
Pulumi program entry point.

Run by the Pulumi engine through the project's ``__main__.py``. Errors are
logged and re-raised so the update fails with a non-zero status and no
outputs are exported.
"""

import logging
import os
from pathlib import Path

from openclaw_vps.config.settings import PulumiConfigSource, load_settings
from openclaw_vps.core.deployment import deploy
from openclaw_vps.errors import OpenClawError
from openclaw_vps.render.files import TemplateFiles

logger = logging.getLogger("openclaw_vps")


def main(base_dir: str | Path | None = None) -> None:
    """
    Declare the deployment for the current stack.

    Args:
        base_dir: Directory holding ``docker-compose.yml`` and
            ``user-data.sh``. Defaults to ``$OPENCLAW_TEMPLATE_DIR`` or the
            working directory.
    """
    logging.basicConfig(
        level=os.environ.get("OPENCLAW_LOG_LEVEL", "INFO"),
        format="%(levelname)s %(name)s: %(message)s",
    )
    if base_dir is None:
        base_dir = os.environ.get("OPENCLAW_TEMPLATE_DIR", ".")

    try:
        settings = load_settings(PulumiConfigSource())
        deploy(settings, files=TemplateFiles(base_dir))
    except OpenClawError as e:
        logger.error("Deployment aborted: %s", e)
        raise
