"""
Configuration loading for gluestage.

Reads a Serverless-style service file (serverless.yml) and resolves the
`custom.Glue` section into a GluePluginConfig. The resolved config is
validated once here and treated as read-only for the rest of the run.

Example:

    custom:
      Glue:
        bucketDeploy: my-deploy-bucket
        s3Prefix: glue/scripts/
        createBucket: true
        createBucketConfig:
          LocationConstraint: eu-west-1
        jobs:
          - name: etl1
            scriptPath: jobs/etl1.py
            role: arn:aws:iam::123456789012:role/glue
        triggers:
          - name: nightly
            schedule: cron(0 2 * * ? *)
            actions:
              - name: etl1
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv

from gluestage.errors import ConfigError
from gluestage.schemas import GlueJob, GlueTrigger


PLUGIN_SECTION = "Glue"

DEFAULT_SERVICE_FILE = "serverless.yml"


@dataclass(frozen=True)
class GluePluginConfig:
    """
    Resolved `custom.Glue` configuration.

    Attributes:
        bucket_deploy: Bucket receiving job scripts
        s3_prefix: Service-wide script prefix, used when a job has no scriptS3LocationPrefix
        create_bucket: Create bucket_deploy when it does not exist
        create_bucket_config: Extra CreateBucket options (LocationConstraint shorthand allowed)
        temp_dir_bucket: Existing bucket for job scratch areas
        temp_dir_s3_prefix: Prefix inside temp_dir_bucket
        jobs: Raw job entries in declaration order
        triggers: Raw trigger entries in declaration order
        base_dir: Directory local paths are resolved against
    """
    bucket_deploy: Optional[str] = None
    s3_prefix: Optional[str] = None
    create_bucket: bool = False
    create_bucket_config: dict[str, Any] = field(default_factory=dict)
    temp_dir_bucket: Optional[str] = None
    temp_dir_s3_prefix: str = ""
    jobs: tuple[dict[str, Any], ...] = ()
    triggers: tuple[dict[str, Any], ...] = ()
    base_dir: Path = field(default_factory=Path.cwd)

    @property
    def has_jobs(self) -> bool:
        return bool(self.jobs)

    @property
    def has_triggers(self) -> bool:
        return bool(self.triggers)

    def resolve_path(self, path: str) -> Path:
        """Resolve a local path from the service file against base_dir."""
        candidate = Path(path)
        if candidate.is_absolute():
            return candidate
        return self.base_dir / candidate

    def __repr__(self) -> str:
        return (
            f"GluePluginConfig(bucket_deploy={self.bucket_deploy}, "
            f"jobs={len(self.jobs)}, triggers={len(self.triggers)})"
        )


def load_service_config(path: Path) -> dict[str, Any]:
    """
    Load and parse a service YAML file.

    Raises:
        ConfigError: If the file is missing, empty, or not valid YAML
    """
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Service file not found: {path}")

    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax in {path}: {e}")

    if not data:
        raise ConfigError(f"Service file is empty: {path}")
    if not isinstance(data, dict):
        raise ConfigError(f"Service file must contain a mapping: {path}")
    return data


def _entries(section: dict[str, Any], key: str) -> tuple[dict[str, Any], ...]:
    raw = section.get(key)
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise ConfigError(f"custom.{PLUGIN_SECTION}.{key} must be a list")
    for entry in raw:
        if not isinstance(entry, dict):
            raise ConfigError(f"custom.{PLUGIN_SECTION}.{key} entries must be mappings, got: {entry!r}")
    return tuple(raw)


def resolve_plugin_config(
    service: dict[str, Any],
    base_dir: Optional[Path] = None,
) -> Optional[GluePluginConfig]:
    """
    Resolve the `custom.Glue` section of a parsed service file.

    Job and trigger entries are parsed once here so that malformed
    definitions fail before anything is uploaded.

    Args:
        service: Parsed service file
        base_dir: Directory local paths are relative to (defaults to cwd)

    Returns:
        GluePluginConfig, or None when the service has no Glue section

    Raises:
        ConfigError: If the section is present but invalid
    """
    section = (service.get("custom") or {}).get(PLUGIN_SECTION)
    if section is None:
        return None
    if not isinstance(section, dict):
        raise ConfigError(f"custom.{PLUGIN_SECTION} must be a mapping")

    jobs = _entries(section, "jobs")
    triggers = _entries(section, "triggers")

    create_bucket_config = section.get("createBucketConfig") or {}
    if not isinstance(create_bucket_config, dict):
        raise ConfigError(f"custom.{PLUGIN_SECTION}.createBucketConfig must be a mapping")

    create_bucket = bool(section.get("createBucket", False))
    bucket_deploy = section.get("bucketDeploy")
    if (jobs or create_bucket) and not bucket_deploy:
        raise ConfigError(f"custom.{PLUGIN_SECTION}.bucketDeploy is required when jobs or createBucket are set")

    for entry in jobs:
        GlueJob.from_dict(entry)
    for entry in triggers:
        GlueTrigger.from_dict(entry)

    return GluePluginConfig(
        bucket_deploy=bucket_deploy,
        s3_prefix=section.get("s3Prefix"),
        create_bucket=create_bucket,
        create_bucket_config=dict(create_bucket_config),
        temp_dir_bucket=section.get("tempDirBucket"),
        temp_dir_s3_prefix=section.get("tempDirS3Prefix") or "",
        jobs=jobs,
        triggers=triggers,
        base_dir=Path(base_dir) if base_dir is not None else Path.cwd(),
    )


def load_config(service_file: Optional[Path] = None) -> Optional[GluePluginConfig]:
    """
    Load the Glue plugin configuration from a service file.

    Local paths in the file are resolved relative to the file's directory.

    Args:
        service_file: Path to the service file. Defaults to ./serverless.yml

    Returns:
        GluePluginConfig, or None when the service has no Glue section

    Raises:
        ConfigError: If the file or the section is invalid
    """
    if service_file is None:
        service_file = Path.cwd() / DEFAULT_SERVICE_FILE
    service_file = Path(service_file)
    service = load_service_config(service_file)
    return resolve_plugin_config(service, base_dir=service_file.resolve().parent)


def load_env_file(env_file: Optional[Path] = None) -> bool:
    """
    Load environment variables (AWS_PROFILE, AWS_REGION, ...) from a .env file.

    Variables already set in the environment are not overridden. A missing
    default file is not an error; an explicitly requested one is.

    Returns:
        True if a file was loaded
    """
    if env_file is None:
        env_file = Path(os.environ.get("GLUESTAGE_ENV_FILE", ".env"))
        if not env_file.exists():
            return False
    elif not Path(env_file).exists():
        raise ConfigError(f"Env file not found: {env_file}")
    return load_dotenv(env_file, override=False)
