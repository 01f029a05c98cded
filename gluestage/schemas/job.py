"""
GlueJob and SupportFile schemas.

A GlueJob is built once per run from the `custom.Glue.jobs` entries of the
service file. The only mutation it ever sees is `stage()`, which records the
S3 location of the uploaded script. Everything the job schema does not know
about is kept in `properties` and forwarded verbatim into the compiled
AWS::Glue::Job resource.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from gluestage.errors import ConfigError


DEFAULT_GLUE_VERSION = "python3-4.0"

GLUE_VERSION_PATTERN = re.compile(r"^(python|scala)(\d+(?:\.\d+)?)?-(\d+\.\d+)$")

# Keys consumed by the schema itself; everything else is pass-through.
JOB_KEYS = (
    "name",
    "scriptPath",
    "scriptS3LocationPrefix",
    "resourceName",
    "SupportFiles",
    "tempDir",
    "type",
    "glueVersion",
    "role",
    "MaxConcurrentRuns",
    "Connections",
    "DefaultArguments",
)


class JobType(str, Enum):
    """Glue job types and the Command.Name each one compiles to."""
    SPARK = "spark"
    PYTHONSHELL = "pythonshell"
    STREAMING = "streaming"

    @property
    def command_name(self) -> str:
        return {
            JobType.SPARK: "glueetl",
            JobType.PYTHONSHELL: "pythonshell",
            JobType.STREAMING: "gluestreaming",
        }[self]

    @classmethod
    def from_string(cls, value: str) -> "JobType":
        try:
            return cls(str(value).lower())
        except ValueError:
            valid = ", ".join(t.value for t in cls)
            raise ConfigError(f"Unknown job type '{value}' (expected one of: {valid})")


@dataclass(frozen=True)
class GlueVersion:
    """
    Parsed `glueVersion` string.

    "python3-4.0"   -> language=python, python_version="3",   glue_version="4.0"
    "python3.9-3.0" -> language=python, python_version="3.9", glue_version="3.0"
    "scala2-4.0"    -> language=scala,  python_version=None,  glue_version="4.0"
    """
    language: str
    python_version: Optional[str]
    glue_version: str

    @classmethod
    def parse(cls, value: str) -> "GlueVersion":
        match = GLUE_VERSION_PATTERN.match(str(value))
        if not match:
            raise ConfigError(
                f"Invalid glueVersion '{value}' (expected e.g. 'python3-4.0' or 'scala2-4.0')"
            )
        language, lang_version, glue_version = match.groups()
        python_version = lang_version if language == "python" else None
        return cls(language=language, python_version=python_version, glue_version=glue_version)


@dataclass(frozen=True)
class SupportFile:
    """
    An auxiliary artifact uploaded next to a job.

    All four fields are mandatory. They are kept Optional here so that a
    partially filled entry can be represented and rejected by validate()
    before any upload starts.
    """
    local_path: Optional[str]
    s3_bucket: Optional[str]
    s3_prefix: Optional[str]
    execute_upload: Optional[bool]

    def validate(self) -> None:
        """Raise ConfigError unless every field is present."""
        missing = [
            name for name in ("local_path", "s3_bucket", "s3_prefix", "execute_upload")
            if getattr(self, name) is None
        ]
        if missing:
            raise ConfigError(
                f"Please provide all parameters for SupportFiles "
                f"(missing: {', '.join(missing)}) in entry {self.local_path!r}"
            )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SupportFile":
        if not isinstance(data, dict):
            raise ConfigError(f"SupportFiles entries must be mappings, got: {data!r}")
        return cls(
            local_path=data.get("local_path"),
            s3_bucket=data.get("s3_bucket"),
            s3_prefix=data.get("s3_prefix"),
            execute_upload=data.get("execute_upload"),
        )


@dataclass
class GlueJob:
    """
    A Glue job definition.

    Attributes:
        name: Glue job name (also the default source of the logical id)
        script_path: Local path of the job script, relative to the service directory
        role: IAM role the job runs as
        type: Job type (spark, pythonshell, streaming)
        glue_version: Parsed glueVersion
        script_s3_location_prefix: Job-level upload prefix, wins over the service-wide s3Prefix
        resource_name: Explicit logical id override
        support_files: Raw SupportFiles entries, materialized by the expander
        temp_dir: True when the job needs a scratch bucket
        max_concurrent_runs: ExecutionProperty.MaxConcurrentRuns
        connections: Glue connection names
        default_arguments: DefaultArguments as written in the service file
        properties: Pass-through CloudFormation properties
        temp_dir_location: Resolved --TempDir value, set by the expander
        script_s3_location: S3 URI of the staged script, set by stage()
    """
    name: str
    script_path: str
    role: str
    type: JobType = JobType.SPARK
    glue_version: GlueVersion = field(default_factory=lambda: GlueVersion.parse(DEFAULT_GLUE_VERSION))
    script_s3_location_prefix: Optional[str] = None
    resource_name: Optional[str] = None
    support_files: tuple[dict[str, Any], ...] = ()
    temp_dir: bool = False
    max_concurrent_runs: int = 1
    connections: tuple[str, ...] = ()
    default_arguments: dict[str, Any] = field(default_factory=dict)
    properties: dict[str, Any] = field(default_factory=dict)
    temp_dir_location: Any = None
    script_s3_location: Optional[str] = None

    @property
    def script_file_name(self) -> str:
        return self.script_path.replace("\\", "/").rstrip("/").split("/")[-1]

    @property
    def is_staged(self) -> bool:
        return self.script_s3_location is not None

    def stage(self, s3_uri: str) -> None:
        """Record where the script was uploaded. Allowed once per run."""
        if self.script_s3_location is not None:
            raise ConfigError(f"Job '{self.name}' script already staged at {self.script_s3_location}")
        self.script_s3_location = s3_uri

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GlueJob":
        """Build a job from a `custom.Glue.jobs` entry, applying defaults."""
        if not isinstance(data, dict):
            raise ConfigError(f"Job entries must be mappings, got: {data!r}")

        for key in ("name", "scriptPath", "role"):
            if not data.get(key):
                raise ConfigError(f"Job {data.get('name', '<unnamed>')!r}: missing '{key}'")

        job_type = JobType.from_string(data.get("type", JobType.SPARK.value))
        glue_version = GlueVersion.parse(data.get("glueVersion", DEFAULT_GLUE_VERSION))
        if glue_version.language == "scala" and job_type is not JobType.SPARK:
            raise ConfigError(
                f"Job '{data['name']}': scala is only supported for spark jobs, not {job_type.value}"
            )

        support_files = data.get("SupportFiles") or []
        if not isinstance(support_files, list):
            raise ConfigError(f"Job '{data['name']}': SupportFiles must be a list")

        default_arguments = data.get("DefaultArguments") or {}
        if not isinstance(default_arguments, dict):
            raise ConfigError(f"Job '{data['name']}': DefaultArguments must be a mapping")

        connections = data.get("Connections") or []
        if isinstance(connections, str):
            connections = [connections]

        return cls(
            name=str(data["name"]),
            script_path=str(data["scriptPath"]),
            role=data["role"],
            type=job_type,
            glue_version=glue_version,
            script_s3_location_prefix=data.get("scriptS3LocationPrefix"),
            resource_name=data.get("resourceName"),
            support_files=tuple(support_files),
            temp_dir=bool(data.get("tempDir", False)),
            max_concurrent_runs=data.get("MaxConcurrentRuns", 1),
            connections=tuple(connections),
            default_arguments=dict(default_arguments),
            properties={k: v for k, v in data.items() if k not in JOB_KEYS},
        )
