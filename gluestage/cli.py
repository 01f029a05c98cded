"""
CLI interface for gluestage.

Provides commands to inspect the Glue section of a service file and to
compile it into CloudFormation, staging scripts and support files to S3.
"""

import json
from pathlib import Path

import click

from gluestage import __version__
from gluestage.config import DEFAULT_SERVICE_FILE


def _load(service_file: Path):
    """Load the plugin config or exit with a readable error."""
    from gluestage.config import load_config
    from gluestage.errors import ConfigError

    try:
        return load_config(service_file)
    except ConfigError as e:
        click.echo(f"✗ Invalid configuration: {e}", err=True)
        raise SystemExit(1)


@click.group()
@click.version_option(version=__version__, prog_name="gluestage")
@click.option("--log-level", default="INFO", show_default=True,
              type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False))
@click.option("--log-format", default="pretty", show_default=True,
              type=click.Choice(["pretty", "structured"]))
@click.option("--log-file", type=click.Path(path_type=Path), help="Also write JSON log lines to this file")
@click.option("--env-file", type=click.Path(path_type=Path), help="Load AWS settings from this .env file")
@click.pass_context
def main(ctx, log_level: str, log_format: str, log_file: Path, env_file: Path):
    """
    gluestage - Stage AWS Glue jobs and compile them into CloudFormation.

    Reads the custom.Glue section of a serverless.yml service file.
    """
    from gluestage.config import load_env_file
    from gluestage.errors import ConfigError
    from gluestage.utils import setup_logging

    ctx.ensure_object(dict)
    setup_logging(log_level=log_level, log_format=log_format, log_file=log_file)
    try:
        load_env_file(env_file)
    except ConfigError as e:
        raise click.UsageError(str(e))


@main.command("compile")
@click.argument("service_file", type=click.Path(path_type=Path), default=DEFAULT_SERVICE_FILE)
@click.option("-o", "--output", type=click.Path(path_type=Path), help="Write the template here instead of stdout")
@click.option("--base-template", type=click.Path(exists=True, path_type=Path),
              help="CloudFormation JSON template to merge the Glue resources into")
@click.option("--dry-run", is_flag=True, help="Compile without uploading anything to S3")
@click.option("--region", help="AWS region for S3 calls")
@click.option("--profile", help="AWS named profile for S3 calls")
@click.option("--workers", default=8, show_default=True, type=click.IntRange(min=1),
              help="Concurrent support-file uploads per job")
def compile_cmd(
    service_file: Path,
    output: Path,
    base_template: Path,
    dry_run: bool,
    region: str,
    profile: str,
    workers: int,
):
    """
    Stage artifacts and compile Glue jobs and triggers.

    SERVICE_FILE defaults to ./serverless.yml.

    Examples:

        gluestage compile

        gluestage compile serverless.yml -o build/glue.json

        gluestage compile --dry-run --base-template .serverless/cloudformation-template-update-stack.json
    """
    from gluestage.deployer import run_deploy
    from gluestage.storage import NoOpBlobStore, S3BlobStore
    from gluestage.template import CompiledTemplate

    config = _load(service_file)

    base = None
    if base_template:
        with open(base_template) as f:
            base = json.load(f)

    if dry_run:
        click.echo("=" * 50, err=True)
        click.echo("=== DRY RUN MODE === (no S3 calls)", err=True)
        click.echo("=" * 50, err=True)
        store = NoOpBlobStore()
    else:
        store = S3BlobStore(region=region, profile=profile)

    template = CompiledTemplate()
    try:
        result = run_deploy(config, store=store, template=template, max_upload_workers=workers)
    except Exception as e:
        click.echo(f"✗ compile failed: {e}", err=True)
        raise SystemExit(1)

    if not result.applicable:
        click.echo("No custom.Glue section found; nothing to compile.", err=True)

    if output:
        template.write_json(output, base=base)
        click.echo(f"✓ wrote {output} ({len(result.resources)} resource(s), {len(result.uploads)} upload(s))", err=True)
    else:
        click.echo(json.dumps(template.merge_into(base), indent=2))

    if dry_run and isinstance(store, NoOpBlobStore):
        from gluestage.utils import format_size

        for put in store.puts:
            click.echo(f"  [DRY-RUN] s3://{put.bucket}/{put.key} ({format_size(put.size)})", err=True)


@main.group("jobs")
def jobs_group():
    """Inspect Glue jobs."""
    pass


@jobs_group.command("list")
@click.argument("service_file", type=click.Path(path_type=Path), default=DEFAULT_SERVICE_FILE)
def list_jobs(service_file: Path):
    """List jobs with the logical id each one compiles to."""
    from gluestage.expander import expand_jobs
    from gluestage.naming import to_resource_name

    config = _load(service_file)
    if config is None or not config.has_jobs:
        click.echo("No jobs defined.")
        return

    for job in expand_jobs(config):
        resource = to_resource_name(job.resource_name or job.name)
        prefix = job.script_s3_location_prefix or config.s3_prefix or "<no prefix>"
        click.echo(f"{resource}:")
        click.echo(f"  name: {job.name}")
        click.echo(f"  type: {job.type.value} (glue {job.glue_version.glue_version})")
        click.echo(f"  script: {job.script_path} -> s3://{config.bucket_deploy}/{prefix}{job.script_file_name}")
        if job.support_files:
            click.echo(f"  support files: {len(job.support_files)}")


@main.group("triggers")
def triggers_group():
    """Inspect Glue triggers."""
    pass


@triggers_group.command("list")
@click.argument("service_file", type=click.Path(path_type=Path), default=DEFAULT_SERVICE_FILE)
def list_triggers(service_file: Path):
    """List triggers and the jobs they reference."""
    from gluestage.expander import expand_triggers
    from gluestage.naming import to_resource_name

    config = _load(service_file)
    if config is None or not config.has_triggers:
        click.echo("No triggers defined.")
        return

    for trigger in expand_triggers(config):
        click.echo(f"{to_resource_name(trigger.name)}:")
        click.echo(f"  name: {trigger.name}")
        click.echo(f"  type: {trigger.type.value}")
        if trigger.schedule:
            click.echo(f"  schedule: {trigger.schedule}")
        click.echo(f"  jobs: {', '.join(trigger.job_names)}")


if __name__ == "__main__":
    main()
