"""
openclaw-vps CLI - render and check the boot script, drive Pulumi.
"""

import sys
import warnings
from pathlib import Path

import click
import yaml

from openclaw_vps.cli.deploy import PulumiCLI
from openclaw_vps.errors import OpenClawError
from openclaw_vps.render.encoding import decode_user_data, encode_user_data
from openclaw_vps.render.files import TemplateFiles
from openclaw_vps.render.template import USER_DATA_PLACEHOLDERS, Template


@click.group()
@click.version_option(version="0.1.0")
def cli():
    """
    openclaw-vps - a single spot instance VPS reachable over Tailscale.

    The deployment itself is a Pulumi program; use `up`, `preview`,
    `destroy` and `outputs` to drive it, and `render`, `decode` and
    `validate` to inspect the boot script offline.
    """
    pass


def _parse_assignments(assignments: tuple[str, ...]) -> dict[str, str]:
    bindings = {}
    for item in assignments:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got '{item}'", param_hint="--set")
        bindings[key] = value
    return bindings


def _load_values(path: str | None) -> dict[str, str]:
    if path is None:
        return {}
    try:
        with open(path, encoding="utf-8") as f:
            document = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise click.BadParameter(f"invalid YAML: {e}", param_hint="--values") from e
    if not isinstance(document, dict):
        raise click.BadParameter("values file must be a YAML mapping", param_hint="--values")

    empty = sorted(str(k) for k, v in document.items() if v is None)
    if empty:
        raise click.BadParameter(f"no value for: {', '.join(empty)}", param_hint="--values")
    return {str(k): str(v) for k, v in document.items()}


@cli.command()
@click.option(
    "--dir",
    "base_dir",
    default=".",
    type=click.Path(exists=True, file_okay=False),
    help="Directory containing docker-compose.yml and user-data.sh",
)
@click.option("--set", "assignments", multiple=True, help="Binding as KEY=VALUE (repeatable)")
@click.option(
    "--values",
    "values_file",
    type=click.Path(exists=True, dir_okay=False),
    help="YAML file of bindings",
)
@click.option("--encode", is_flag=True, help="Print the base64 user-data payload instead")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write to a file instead of stdout")
def render(base_dir: str, assignments, values_file, encode: bool, output):
    """
    Render user-data.sh offline.

    DockerComposeB64 is computed from docker-compose.yml unless supplied.

    Example:
        openclaw-vps render --set EBSVolumeID=vol-123 --values secrets.yaml
        openclaw-vps render --values secrets.yaml --encode -o user-data.b64
    """
    files = TemplateFiles(base_dir)
    bindings = _load_values(values_file)
    bindings.update(_parse_assignments(assignments))

    try:
        if "DockerComposeB64" not in bindings:
            bindings["DockerComposeB64"] = encode_user_data(files.compose())
        template = Template.parse(files.user_data())
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            rendered = template.render(bindings)
    except OpenClawError as e:
        click.echo(f"✗ Render failed: {e}", err=True)
        sys.exit(1)

    for warning in caught:
        click.echo(f"warning: {warning.message}", err=True)

    text = encode_user_data(rendered) if encode else rendered
    if output:
        Path(output).write_text(text, encoding="utf-8")
        click.echo(f"✓ Wrote {output}", err=True)
    else:
        click.echo(text, nl=encode)


@cli.command()
@click.argument("payload", required=False)
def decode(payload: str | None):
    """
    Decode a base64 user-data payload (argument or stdin).

    Example:
        aws ec2 describe-launch-template-versions ... | jq -r .UserData | openclaw-vps decode
    """
    if payload is None:
        payload = click.get_text_stream("stdin").read()
    try:
        data = decode_user_data(payload.strip())
    except ValueError as e:
        click.echo(f"✗ Decode failed: {e}", err=True)
        sys.exit(1)
    click.get_binary_stream("stdout").write(data)


@cli.command()
@click.option(
    "--dir",
    "base_dir",
    default=".",
    type=click.Path(exists=True, file_okay=False),
    help="Directory containing docker-compose.yml and user-data.sh",
)
def validate(base_dir: str):
    """
    Check the template files without deploying.

    Fails if a file is unreadable, the compose descriptor is invalid, or
    the boot script uses a placeholder the deployment does not supply.
    """
    files = TemplateFiles(base_dir)
    try:
        files.compose()
        template = Template.parse(files.user_data())
    except OpenClawError as e:
        click.echo(f"✗ {e}", err=True)
        sys.exit(1)

    used = set(template.placeholders)
    unknown = sorted(used - USER_DATA_PLACEHOLDERS)
    unused = sorted(USER_DATA_PLACEHOLDERS - used)

    click.echo(f"Placeholders: {', '.join(template.placeholders) or '(none)'}")
    for name in unused:
        click.echo(f"warning: {name} is supplied but not used by {files.user_data_path.name}", err=True)
    if unknown:
        click.echo(f"✗ Unknown placeholder(s): {', '.join(unknown)}", err=True)
        sys.exit(1)
    click.echo("✓ Templates are valid")


def _stack_options(fn):
    fn = click.option("--stack", "-s", help="Pulumi stack name")(fn)
    fn = click.option(
        "--cwd",
        default=".",
        type=click.Path(file_okay=False),
        help="Pulumi project directory",
    )(fn)
    return fn


def _run_pulumi(action):
    try:
        return action()
    except OpenClawError as e:
        click.echo(f"✗ {e}", err=True)
        sys.exit(1)


@cli.command()
@_stack_options
def preview(stack, cwd):
    """Show the changes `up` would make."""
    _run_pulumi(lambda: PulumiCLI(cwd, stack).preview())


@cli.command()
@_stack_options
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
def up(stack, cwd, yes: bool):
    """Create or update the deployment."""
    _run_pulumi(lambda: PulumiCLI(cwd, stack).up(yes=yes))


@cli.command()
@_stack_options
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
def destroy(stack, cwd, yes: bool):
    """Tear the deployment down, including the data volume."""
    _run_pulumi(lambda: PulumiCLI(cwd, stack).destroy(yes=yes))


@cli.command()
@_stack_options
def outputs(stack, cwd):
    """Print the stack outputs."""
    values = _run_pulumi(lambda: PulumiCLI(cwd, stack).stack_output())
    for key, value in values.items():
        click.echo(f"{key}: {value}")


if __name__ == "__main__":
    cli()
