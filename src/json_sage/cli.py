"""
Command line interface for json-sage.

Generated JSON goes to stdout (or a file); the banner, status lines and
logs go to stderr so output can be piped.
"""

import asyncio
import functools
import sys
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

import click
import structlog

from json_sage import __version__
from json_sage.config import Settings
from json_sage.exceptions import JsonSageError
from json_sage.inference.analyzer import JsonAnalyzer
from json_sage.llm.deepseek_client import DeepSeekClient
from json_sage.llm.prompt_builder import PromptBuilder
from json_sage.logging_config import configure_logging
from json_sage.retry.exceptions import ApiError, RetryableError
from json_sage.services.schema_service import SchemaService
from json_sage.storage import dump_json, load_json, load_schema, save_schema


logger = structlog.get_logger(__name__)

EXAMPLES_TEXT = """
Example Usage:

1. Generate schema interactively:
   $ json-sage generate -i

2. Generate schema from description:
   $ json-sage generate -d "Create a product object with name, price and description"

3. Generate and save to file:
   $ json-sage generate -d "User profile with email and age" -o schema.json

4. Infer a schema locally from sample data (no API key needed):
   $ json-sage infer data.json -f

5. Infer locally, then refine with the model:
   $ json-sage infer data.json --ai -o schema.json

6. Describe every field of a JSON file:
   $ json-sage describe data.json

7. Generate example data for a schema:
   $ json-sage sample schema.json

8. Validate an existing schema, or data against it:
   $ json-sage validate schema.json
   $ json-sage validate schema.json --data data.json
"""


@dataclass
class CliContext:
    settings: Settings


def build_service(settings: Settings) -> SchemaService:
    """Wire the DeepSeek client, prompt builder and service from settings."""
    client = DeepSeekClient(
        api_key=settings.DEEPSEEK_API_KEY or "",
        base_url=settings.DEEPSEEK_BASE_URL,
        timeout=settings.DEEPSEEK_TIMEOUT,
        default_model=settings.DEEPSEEK_MODEL,
    )
    prompt_builder = PromptBuilder(
        sample_limit=settings.PROMPT_SAMPLE_LIMIT,
        default_model=settings.DEEPSEEK_MODEL,
        default_temperature=settings.LLM_TEMPERATURE,
        default_max_tokens=settings.LLM_MAX_TOKENS,
    )
    return SchemaService(client, prompt_builder, settings)


def run_remote(service: SchemaService, operation: Callable[[SchemaService], Awaitable[Any]]) -> Any:
    """Run one async service call and close the client afterwards."""
    async def runner():
        async with service:
            return await operation(service)

    return asyncio.run(runner())


def show_welcome() -> None:
    message = (
        f"json-sage v{__version__}\n"
        "Generate JSON Schema using natural language\n\n"
        "Type json-sage --help to see available commands\n"
    )
    click.echo(click.style(message, fg="cyan"), err=True)


def handle_errors(func):
    """Print known failures as ``Error: <message>`` and exit with status 1."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (JsonSageError, RetryableError, ApiError) as e:
            logger.debug("Command failed", error=repr(e))
            click.echo(click.style(f"Error: {e.message}", fg="red"), err=True)
            sys.exit(1)
        except (click.ClickException, click.Abort):
            raise
        except Exception as e:
            logger.exception("Unexpected command failure", error_type=type(e).__name__)
            click.echo(click.style(f"Error: {e}", fg="red"), err=True)
            sys.exit(1)
    return wrapper


def emit_json(data: Any, output: Optional[str], pretty: bool, label: str = "Schema") -> None:
    if output:
        path = save_schema(data, output, pretty=pretty)
        click.echo(click.style(f"{label} saved to {path}", fg="green"), err=True)
    else:
        click.echo(dump_json(data, pretty=pretty))


def _non_empty(value: str) -> str:
    if not value.strip():
        raise click.BadParameter("Description cannot be empty")
    return value


@click.group()
@click.version_option(__version__, prog_name="json-sage")
@click.option("-q", "--quiet", is_flag=True, help="Do not print the welcome banner.")
@click.option("--log-level", default=None, help="Override LOG_LEVEL (DEBUG, INFO, WARNING, ...).")
@click.pass_context
def cli(ctx: click.Context, quiet: bool, log_level: Optional[str]) -> None:
    """Generate, infer and validate JSON Schema using natural language."""
    settings = Settings()
    configure_logging(log_level or settings.LOG_LEVEL, settings.ENVIRONMENT)
    if not quiet:
        show_welcome()
    ctx.obj = CliContext(settings=settings)


@cli.command()
@click.option("-i", "--interactive", is_flag=True, help="Use interactive mode.")
@click.option("-d", "--description", help="Natural language description of the schema.")
@click.option("-o", "--output", help="Output file path.")
@click.option("-f", "--format", "pretty", is_flag=True, help="Format the output JSON.")
@click.pass_obj
@handle_errors
def generate(obj: CliContext, interactive: bool, description: Optional[str], output: Optional[str], pretty: bool) -> None:
    """Generate JSON Schema from a natural language description."""
    if interactive or not description:
        description = click.prompt("Please describe your data structure", value_proc=_non_empty)
        pretty = click.confirm("Would you like to format the output?", default=True)
        output = click.prompt(
            "Where would you like to save the schema? (Press enter for stdout)",
            default="",
            show_default=False,
        )

    service = build_service(obj.settings)
    click.echo("Generating schema...", err=True)
    schema = run_remote(service, lambda s: s.generate_schema(description))
    emit_json(schema, output or None, pretty)


@cli.command()
@click.argument("file")
@click.option("-o", "--output", help="Output file path.")
@click.option("-f", "--format", "pretty", is_flag=True, help="Format the output JSON.")
@click.option("--sample-size", type=click.IntRange(min=1), help="Array elements inspected per array.")
@click.option("--max-depth", type=click.IntRange(min=0), help="Nesting depth past which any value is accepted.")
@click.option("--ai", is_flag=True, help="Refine the inferred schema with the model.")
@click.option("--insights", is_flag=True, help="Print structure metrics and quality warnings.")
@click.pass_obj
@handle_errors
def infer(
    obj: CliContext,
    file: str,
    output: Optional[str],
    pretty: bool,
    sample_size: Optional[int],
    max_depth: Optional[int],
    ai: bool,
    insights: bool,
) -> None:
    """Infer a JSON Schema from sample JSON FILE."""
    overrides = {}
    if sample_size is not None:
        overrides["INFER_SAMPLE_SIZE"] = sample_size
    if max_depth is not None:
        overrides["INFER_MAX_DEPTH"] = max_depth
    settings = obj.settings.model_copy(update=overrides)

    data = load_json(file)
    if insights:
        _print_insights(data)

    service = build_service(settings)
    if ai:
        click.echo("Refining inferred schema...", err=True)
        schema = run_remote(service, lambda s: s.generate_schema_from_data(data))
    else:
        schema = service.infer_schema(data)
    emit_json(schema, output, pretty)


def _print_insights(data: Any) -> None:
    result = JsonAnalyzer().analyze(data)
    click.echo(
        f"depth={result.depth} array_depth={result.array_depth} "
        f"fields={result.field_count} nulls={result.null_count}",
        err=True,
    )
    for path in result.mixed_type_paths:
        click.echo(click.style(f"mixed types at {path}", fg="yellow"), err=True)
    for insight in result.insights:
        color = "red" if insight.severity == "error" else "yellow"
        click.echo(click.style(f"[{insight.type}] {insight.message}", fg=color), err=True)


@cli.command()
@click.argument("file")
@click.option("-o", "--output", help="Output file path.")
@click.pass_obj
@handle_errors
def describe(obj: CliContext, file: str, output: Optional[str]) -> None:
    """Generate a description for every field of JSON FILE."""
    data = load_json(file)
    service = build_service(obj.settings)
    click.echo("Describing fields...", err=True)
    descriptions = run_remote(service, lambda s: s.generate_field_descriptions(data))
    emit_json(descriptions, output, pretty=True, label="Descriptions")


@cli.command()
@click.argument("schema_file")
@click.option("-o", "--output", help="Output file path.")
@click.pass_obj
@handle_errors
def sample(obj: CliContext, schema_file: str, output: Optional[str]) -> None:
    """Generate example data conforming to SCHEMA_FILE."""
    schema = load_schema(schema_file)
    service = build_service(obj.settings)
    click.echo("Generating examples...", err=True)
    examples = run_remote(service, lambda s: s.generate_examples(schema))
    emit_json(examples, output, pretty=True, label="Examples")


@cli.command()
@click.argument("file")
@click.option("--data", "data_file", help="Validate this JSON file against the schema instead.")
@click.pass_obj
@handle_errors
def validate(obj: CliContext, file: str, data_file: Optional[str]) -> None:
    """Validate JSON Schema FILE (or --data against it). Exits 1 when invalid."""
    schema = load_schema(file)
    service = build_service(obj.settings)

    if data_file:
        result = service.validate_data(load_json(data_file), schema)
        subject = "Data"
    else:
        result = service.validate_schema(schema)
        subject = "Schema"

    if result.valid:
        click.echo(click.style(f"{subject} is valid!", fg="green"))
        return

    click.echo(click.style(f"{subject} validation failed ({result.error_count} error(s)):", fg="yellow"))
    for error in result.errors:
        click.echo(click.style(f"- {error}", fg="red"))
    sys.exit(1)


@cli.command()
def examples() -> None:
    """Show example usage."""
    click.echo(click.style(EXAMPLES_TEXT, fg="cyan"))


def main() -> None:
    cli(prog_name="json-sage")


if __name__ == "__main__":
    main()
