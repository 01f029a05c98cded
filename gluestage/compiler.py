"""
Compiler - Transform jobs, triggers and buckets into CloudFormation fragments.

Every function here is pure: it reads its input and returns a new dict. The
fragments are plain CloudFormation documents, e.g.

    {"Type": "AWS::Glue::Job", "Properties": {...}}

Pass-through properties from the service file are copied verbatim; only the
script location, names, command and a fixed set of argument keys are derived.
"""

import copy
from typing import Any, Optional

from gluestage.config import GluePluginConfig
from gluestage.errors import CompileError
from gluestage.schemas import GlueJob, GlueTrigger


GLUE_JOB_TYPE = "AWS::Glue::Job"
GLUE_TRIGGER_TYPE = "AWS::Glue::Trigger"
S3_BUCKET_TYPE = "AWS::S3::Bucket"

# Logical id and output name of the shared scratch bucket
GLUE_TEMP_BUCKET_REF = "GlueJobTempBucket"
GLUE_TEMP_BUCKET_OUTPUT = "GlueJobTempBucketName"

LOCATION_CONSTRAINT = "LocationConstraint"
CREATE_BUCKET_CONFIGURATION = "CreateBucketConfiguration"

# DefaultArguments keys accepted in the service file -> Glue special parameters
DEFAULT_ARGUMENT_KEYS = {
    "class": "--class",
    "scriptLocation": "--scriptLocation",
    "tempDir": "--TempDir",
    "extraPyFiles": "--extra-py-files",
    "extraJars": "--extra-jars",
    "userJarsFirst": "--user-jars-first",
    "usePostgresDriver": "--use-postgres-driver",
    "extraFiles": "--extra-files",
    "disableProxy": "--disable-proxy",
    "jobBookmarkOption": "--job-bookmark-option",
    "enableAutoScaling": "--enable-auto-scaling",
    "enableS3ParquetOptimizedCommitter": "--enable-s3-parquet-optimized-committer",
    "enableRenameAlgorithmV2": "--enable-rename-algorithm-v2",
    "enableGlueDatacatalog": "--enable-glue-datacatalog",
    "enableMetrics": "--enable-metrics",
    "enableContinuousCloudwatchLog": "--enable-continuous-cloudwatch-log",
    "enableContinuousLogFilter": "--enable-continuous-log-filter",
    "continuousLogLogGroup": "--continuous-log-logGroup",
    "continuousLogLogStreamPrefix": "--continuous-log-logStreamPrefix",
    "continuousLogConversionPattern": "--continuous-log-conversionPattern",
    "enableSparkUi": "--enable-spark-ui",
    "sparkEventLogsPath": "--spark-event-logs-path",
    "additionalPythonModules": "--additional-python-modules",
    "pythonModulesInstallerOption": "--python-modules-installer-option",
}

CUSTOM_ARGUMENTS_KEY = "customArguments"


def _argument_value(value: Any) -> Any:
    """Glue arguments are strings; render booleans the way Glue expects them."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


def _argument_key(key: str) -> str:
    if key in DEFAULT_ARGUMENT_KEYS:
        return DEFAULT_ARGUMENT_KEYS[key]
    if key.startswith("--"):
        return key
    return f"--{key}"


def compile_default_arguments(job: GlueJob) -> dict[str, Any]:
    """
    Build the DefaultArguments map of a job.

    Order of precedence (later wins): derived keys (--job-language, --TempDir),
    mapped DefaultArguments keys, customArguments.
    """
    arguments: dict[str, Any] = {"--job-language": job.glue_version.language}
    if job.temp_dir_location is not None:
        arguments["--TempDir"] = copy.deepcopy(job.temp_dir_location)

    custom: dict[str, Any] = {}
    for key, value in job.default_arguments.items():
        if key == CUSTOM_ARGUMENTS_KEY:
            custom = value or {}
            continue
        if value is None:
            continue
        arguments[_argument_key(key)] = _argument_value(value)

    for key, value in custom.items():
        arguments[key] = _argument_value(value)

    return arguments


def compile_job(job: GlueJob) -> dict[str, Any]:
    """
    Compile a staged job into an AWS::Glue::Job resource.

    Args:
        job: Job whose script has already been uploaded

    Returns:
        CloudFormation resource fragment

    Raises:
        CompileError: If the job has not been staged
    """
    if not job.is_staged:
        raise CompileError(
            f"Job '{job.name}' has no staged script location; upload it before compiling"
        )

    command: dict[str, Any] = {
        "Name": job.type.command_name,
        "ScriptLocation": job.script_s3_location,
    }
    if job.glue_version.python_version:
        command["PythonVersion"] = job.glue_version.python_version

    # Derived keys are set after the pass-through ones and always win
    properties: dict[str, Any] = copy.deepcopy(job.properties)
    properties.update({
        "Name": job.name,
        "Role": job.role,
        "Command": command,
        "GlueVersion": job.glue_version.glue_version,
        "ExecutionProperty": {"MaxConcurrentRuns": job.max_concurrent_runs},
        "DefaultArguments": compile_default_arguments(job),
    })
    if job.connections:
        properties["Connections"] = {"Connections": list(job.connections)}

    return {"Type": GLUE_JOB_TYPE, "Properties": properties}


def compile_trigger(trigger: GlueTrigger) -> dict[str, Any]:
    """Compile a trigger into an AWS::Glue::Trigger resource."""
    actions = []
    for action in trigger.actions:
        compiled: dict[str, Any] = copy.deepcopy(action.properties)
        compiled["JobName"] = action.job_name
        if action.args is not None:
            compiled["Arguments"] = copy.deepcopy(action.args)
        if action.timeout is not None:
            compiled["Timeout"] = action.timeout
        actions.append(compiled)

    properties: dict[str, Any] = copy.deepcopy(trigger.properties)
    properties.update({
        "Name": trigger.name,
        "Type": trigger.type.value,
        "Actions": actions,
    })
    if trigger.schedule is not None:
        properties["Schedule"] = trigger.schedule
    if trigger.predicate is not None:
        properties["Predicate"] = copy.deepcopy(trigger.predicate)

    return {"Type": GLUE_TRIGGER_TYPE, "Properties": properties}


def compile_bucket(name: str) -> dict[str, Any]:
    """Minimal AWS::S3::Bucket resource."""
    return {"Type": S3_BUCKET_TYPE, "Properties": {"BucketName": name}}


def compile_output(value: Any, description: Optional[str] = None) -> dict[str, Any]:
    """CloudFormation output entry."""
    output: dict[str, Any] = {"Value": value}
    if description:
        output["Description"] = description
    return output


def compile_bucket_creation_params(config: GluePluginConfig) -> dict[str, Any]:
    """
    Build the keyword arguments for S3 CreateBucket from bucketDeploy and createBucketConfig.

    A top-level `LocationConstraint` shorthand is moved into
    `CreateBucketConfiguration.LocationConstraint`. The input mapping is never
    modified, so calling this twice with the same config gives the same result.

        bucketDeploy: b
        createBucketConfig: {LocationConstraint: eu-west-1, ACL: private}
        -> {"Bucket": "b", "ACL": "private",
            "CreateBucketConfiguration": {"LocationConstraint": "eu-west-1"}}
    """
    bucket = config.bucket_deploy
    options = copy.deepcopy(config.create_bucket_config or {})
    params: dict[str, Any] = {"Bucket": bucket}

    location = options.pop(LOCATION_CONSTRAINT, None)
    params.update(options)

    if location is not None:
        nested = dict(params.get(CREATE_BUCKET_CONFIGURATION) or {})
        nested[LOCATION_CONSTRAINT] = location
        params[CREATE_BUCKET_CONFIGURATION] = nested

    # The target bucket always comes from bucketDeploy
    params["Bucket"] = bucket
    return params
