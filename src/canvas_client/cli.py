"""
Command line interface for browsing Canvas resources.

    canvas login --base-url https://school.instructure.com --api-key ...
    canvas list courses
    canvas list modules --course-id 42 --all
    canvas show assignments 7 --course-id 42
"""

import functools
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import click
import yaml
from pydantic import ValidationError

from canvas_client.client import CanvasClient
from canvas_client.exceptions import (
    CanvasApiError,
    CanvasClientError,
    ConfigurationError,
    ContextError,
    NetworkError,
)
from canvas_client.settings import CanvasSettings

CONFIG_DIR = Path.home() / ".canvas"
PROFILE_FILE = "profile.yaml"

RESOURCES = [
    "courses",
    "modules",
    "module_items",
    "assignments",
    "submissions",
    "enrollments",
    "rubrics",
    "users",
]


def default_profile_path() -> Path:
    return CONFIG_DIR / PROFILE_FILE


def read_profile(path: Optional[str]) -> Dict[str, Any]:
    """Load settings stored by ``canvas login``; a missing file yields ``{}``."""
    profile_path = Path(path) if path else default_profile_path()
    if not profile_path.exists():
        return {}
    with open(profile_path, "r") as file:
        data = yaml.safe_load(file) or {}
    if not isinstance(data, dict):
        raise click.ClickException(f"Profile {profile_path} must contain a mapping")
    return data


def write_profile(path: Optional[str], data: Dict[str, Any]) -> Path:
    profile_path = Path(path) if path else default_profile_path()
    profile_path.parent.mkdir(parents=True, exist_ok=True)
    with open(profile_path, "w") as file:
        file.write(yaml.safe_dump(data))
    profile_path.chmod(0o600)
    return profile_path


def build_settings(ctx: click.Context) -> CanvasSettings:
    """Merge profile file, command line options and environment."""
    options = ctx.obj
    values = read_profile(options.get("PROFILE_PATH"))
    for key in ("base_url", "api_key"):
        if options.get(key):
            values[key] = options[key]
    return CanvasSettings.from_env(**values)


def handle_api_exceptions(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except CanvasApiError as e:
            click.echo(f"[{click.style(str(e.status_code), fg='red')}] {e.message}", err=True)
        except (ConfigurationError, ContextError) as e:
            click.echo(f"[{click.style('config', fg='red')}] {e.message}", err=True)
        except NetworkError as e:
            click.echo(f"[{click.style('network', fg='red')}] {e.message}", err=True)
        except CanvasClientError as e:
            click.echo(f"[{click.style('error', fg='red')}] {e.message}", err=True)
        except ValidationError as e:
            for error in e.errors():
                field = ".".join(str(part) for part in error["loc"])
                click.echo(f"[{click.style('invalid', fg='red')}] {field}: {error['msg']}", err=True)
        raise SystemExit(1)

    return wrapper


def scoped_endpoint(
    client: CanvasClient,
    resource: str,
    course_id: Optional[int],
    module_id: Optional[int],
    assignment_id: Optional[int],
):
    """Resolve a resource name plus parent ids to an endpoint client."""
    if resource == "rubrics" and course_id is not None:
        return client.rubrics.for_course(course_id)
    endpoint = getattr(client, resource)
    context = {
        "course_id": course_id,
        "module_id": module_id,
        "assignment_id": assignment_id,
    }
    wanted = {k: v for k, v in context.items() if k in endpoint.context_fields() and v is not None}
    return endpoint.with_context(**wanted) if wanted else endpoint


def context_options(func):
    func = click.option("--assignment-id", type=int, help="Parent assignment (submissions)")(func)
    func = click.option("--module-id", type=int, help="Parent module (module items)")(func)
    func = click.option("--course-id", "-c", type=int, help="Parent course")(func)
    return func


def echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, default=str))


@click.group()
@click.option(
    "--profile",
    envvar="CANVAS_PROFILE",
    type=click.Path(dir_okay=False),
    help=f"Path to profile YAML file (default ~/.canvas/{PROFILE_FILE})",
)
@click.option("--base-url", envvar="CANVAS_BASE_URL", help="Canvas instance URL")
@click.option("--api-key", envvar="CANVAS_API_KEY", help="Canvas API access token")
@click.option("--verbose", "-v", is_flag=True, help="Log HTTP requests")
@click.pass_context
def cli(ctx, profile, base_url, api_key, verbose):
    """Canvas CLI - Browse courses, modules, assignments and more."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["PROFILE_PATH"] = profile
    ctx.obj["base_url"] = base_url
    ctx.obj["api_key"] = api_key


@cli.command()
@click.option("--base-url", prompt="Canvas URL", help="Canvas instance URL")
@click.option("--api-key", prompt="API key", hide_input=True, help="Canvas API access token")
@click.option("--account-id", type=int, default=None, help="Default account id")
@click.pass_context
@handle_api_exceptions
def login(ctx, base_url, api_key, account_id):
    """Verify credentials and store them in the profile file."""
    values = {"base_url": base_url, "api_key": api_key}
    if account_id is not None:
        values["account_id"] = account_id
    with CanvasClient(CanvasSettings(**values)) as client:
        me = client.users.me()
    path = write_profile(ctx.obj.get("PROFILE_PATH"), values)
    click.echo(f"Logged in as {click.style(str(me.name), fg='green')} (profile saved to {path})")


@cli.command("config")
@click.pass_context
@handle_api_exceptions
def show_config(ctx):
    """Print the effective configuration with the API key masked."""
    echo_json(build_settings(ctx).debug_config())


@cli.command("list")
@click.argument("resource", type=click.Choice(RESOURCES))
@context_options
@click.option("--all", "fetch_all", is_flag=True, help="Follow pagination to the last page")
@click.option("--per-page", type=int, default=None, help="Page size")
@click.option("--page", type=int, default=None, help="Page number")
@click.option("--query", "-q", "query", type=(str, str), multiple=True, help="Extra query parameter")
@click.pass_context
@handle_api_exceptions
def list_resources(ctx, resource, course_id, module_id, assignment_id, fetch_all, per_page, page, query):
    """List resources, one JSON object per item."""
    params = dict(query)
    with CanvasClient(build_settings(ctx)) as client:
        endpoint = scoped_endpoint(client, resource, course_id, module_id, assignment_id)
        if fetch_all:
            items = endpoint.all(per_page=per_page, **params)
            summary = f"{len(items)} items"
        else:
            result = endpoint.paginate(page=page, per_page=per_page, **params)
            items = result.data
            summary = result.summary()
        for item in items:
            click.echo(item.model_dump_json(exclude_none=True))
        click.echo(click.style(summary, fg="cyan"), err=True)


@cli.command("show")
@click.argument("resource", type=click.Choice(RESOURCES))
@click.argument("resource_id")
@context_options
@click.pass_context
@handle_api_exceptions
def show_resource(ctx, resource, resource_id, course_id, module_id, assignment_id):
    """Show one resource as JSON."""
    with CanvasClient(build_settings(ctx)) as client:
        endpoint = scoped_endpoint(client, resource, course_id, module_id, assignment_id)
        item = endpoint.find(resource_id)
        click.echo(item.model_dump_json(indent=2, exclude_none=True))


if __name__ == "__main__":
    cli()
