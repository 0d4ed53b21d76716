"""Boot-script template rendering and user-data encoding."""

from openclaw_vps.render.template import (
    USER_DATA_PLACEHOLDERS,
    Literal,
    Placeholder,
    Template,
    render,
    render_output,
)
from openclaw_vps.render.encoding import (
    decode_user_data,
    encode_user_data,
)
from openclaw_vps.render.files import (
    DOCKER_COMPOSE_FILE,
    USER_DATA_FILE,
    TemplateFiles,
    read_compose_file,
    read_template_bytes,
    read_template_file,
)

__all__ = [
    "USER_DATA_PLACEHOLDERS",
    "Literal",
    "Placeholder",
    "Template",
    "render",
    "render_output",
    "decode_user_data",
    "encode_user_data",
    "DOCKER_COMPOSE_FILE",
    "USER_DATA_FILE",
    "TemplateFiles",
    "read_compose_file",
    "read_template_bytes",
    "read_template_file",
]
