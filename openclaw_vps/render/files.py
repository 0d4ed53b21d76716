"""
Readers for the two template inputs: the compose descriptor and the
boot-script template. Both are read verbatim at the start of a run.
"""

import logging
from pathlib import Path

import yaml

from openclaw_vps.errors import TemplateFileReadError

logger = logging.getLogger(__name__)

DOCKER_COMPOSE_FILE = "docker-compose.yml"
USER_DATA_FILE = "user-data.sh"


def read_template_bytes(path: str | Path) -> bytes:
    """
    Read a template file as raw bytes.

    Raises:
        TemplateFileReadError: If the file is missing or unreadable
    """
    path = Path(path)
    if not path.is_file():
        raise TemplateFileReadError(str(path), "file not found")
    try:
        data = path.read_bytes()
    except OSError as e:
        raise TemplateFileReadError(str(path), e.strerror or str(e)) from e
    logger.debug("Read %d bytes from %s", len(data), path)
    return data


def read_template_file(path: str | Path) -> str:
    """
    Read a template file as UTF-8 text.

    Raises:
        TemplateFileReadError: If the file is missing, unreadable or not UTF-8
    """
    data = read_template_bytes(path)
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise TemplateFileReadError(str(path), f"not valid UTF-8 ({e.reason})") from e


def read_compose_file(path: str | Path) -> bytes:
    """
    Read the compose descriptor verbatim after checking it parses.

    The descriptor is embedded byte-for-byte into the boot script, so the
    parsed document is only used for validation.

    Raises:
        TemplateFileReadError: If the file is unreadable, is not YAML, or
            has no ``services`` mapping
    """
    data = read_template_bytes(path)
    try:
        document = yaml.safe_load(data)
    except yaml.YAMLError as e:
        raise TemplateFileReadError(str(path), f"invalid YAML: {e}") from e

    if not isinstance(document, dict):
        raise TemplateFileReadError(str(path), "expected a YAML mapping")
    services = document.get("services")
    if not isinstance(services, dict) or not services:
        raise TemplateFileReadError(str(path), "no 'services' defined")

    logger.info("Compose descriptor %s defines services: %s", path, ", ".join(services))
    return data


class TemplateFiles:
    """
    Locates and reads the deployment's template inputs.

    Example:
        files = TemplateFiles(base_dir=Path("."))
        compose = files.compose()      # bytes, verbatim
        user_data = files.user_data()  # str
    """

    def __init__(
        self,
        base_dir: str | Path = ".",
        compose_file: str = DOCKER_COMPOSE_FILE,
        user_data_file: str = USER_DATA_FILE,
    ):
        self.base_dir = Path(base_dir)
        self.compose_path = self.base_dir / compose_file
        self.user_data_path = self.base_dir / user_data_file

    def compose(self) -> bytes:
        return read_compose_file(self.compose_path)

    def user_data(self) -> str:
        return read_template_file(self.user_data_path)

    def __repr__(self):
        return f"TemplateFiles(base_dir={str(self.base_dir)!r})"
