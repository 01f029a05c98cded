"""Deployer - stage Glue artifacts and compile the service's Glue resources.

This module drives one deployment run:
1. Optionally creates the deploy bucket (existence check, then create)
2. For each job, in declaration order:
   a. uploads the job script and rewrites its location to the S3 URI
   b. uploads its support files (thread pool, joined before moving on)
   c. compiles the job and files it under "resources"
3. Synthesizes a shared scratch bucket when a job needs one and none is configured
4. Compiles the triggers

Usage:
    from gluestage.deployer import run_deploy

    result = run_deploy(config, store=S3BlobStore(), template=template)

Any error aborts the run where it happens. Uploads already done and fragments
already appended are left as they are; the template must not be used then.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from gluestage.compiler import (
    GLUE_TEMP_BUCKET_OUTPUT,
    GLUE_TEMP_BUCKET_REF,
    compile_bucket,
    compile_bucket_creation_params,
    compile_job,
    compile_output,
    compile_trigger,
)
from gluestage.config import GluePluginConfig
from gluestage.errors import ConfigError
from gluestage.expander import expand_jobs, expand_support_files, expand_triggers
from gluestage.naming import random_suffix, to_resource_name
from gluestage.schemas import GlueJob, SupportFile
from gluestage.storage import BlobStoreClient
from gluestage.template import CompiledTemplate

logger = logging.getLogger(__name__)


STAGED_URI_SCHEME = "s3"
TEMP_BUCKET_NAME_PREFIX = "glue-temp-bucket-"
DEFAULT_UPLOAD_WORKERS = 8


def staged_uri(bucket: str, key: str) -> str:
    return f"{STAGED_URI_SCHEME}://{bucket}/{key}"


def _check_reserved(name: str, owner: str) -> None:
    """The temp bucket logical id belongs to the deployer."""
    if name == GLUE_TEMP_BUCKET_REF:
        raise ConfigError(f"{owner}: resource name '{name}' is reserved for the Glue temp bucket")


@dataclass
class DeployResult:
    """Summary of a completed run."""
    applicable: bool = True
    bucket_created: bool = False
    uploads: list[str] = field(default_factory=list)
    skipped_support_files: list[str] = field(default_factory=list)
    resources: list[str] = field(default_factory=list)
    outputs: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class _Upload:
    path: Path
    bucket: str
    key: str


class Deployer:
    """
    Runs the staging and compilation phases for one resolved configuration.

    Attributes:
        config: Resolved plugin configuration, or None when the service has no Glue section
        store: Object store receiving the artifacts
        template: Accumulator receiving the compiled fragments
        max_upload_workers: Upper bound on concurrent support-file uploads per job
    """

    def __init__(
        self,
        config: Optional[GluePluginConfig],
        store: BlobStoreClient,
        template: Optional[CompiledTemplate] = None,
        max_upload_workers: int = DEFAULT_UPLOAD_WORKERS,
    ):
        self.config = config
        self.store = store
        self.template = template if template is not None else CompiledTemplate()
        self.max_upload_workers = max(1, max_upload_workers)
        self.result = DeployResult()

    def run(self) -> DeployResult:
        if self.config is None:
            logger.info("Glue config not found.")
            self.result.applicable = False
            return self.result

        logger.info("Glue config detected.")
        self.process_jobs()
        self.process_triggers()
        return self.result

    # ------------------------------------------------------------------ #
    # Jobs
    # ------------------------------------------------------------------ #

    def process_jobs(self) -> None:
        if not self.config.has_jobs:
            logger.info("Jobs not found.")
            return

        logger.info("Processing Jobs.")
        jobs = expand_jobs(self.config)

        if self.config.create_bucket:
            self.ensure_deploy_bucket()

        for job in jobs:
            self.upload_job_script(job)
            self.upload_support_files(job)
            self.record_job(job)

        if any(job.temp_dir for job in jobs) and not self.config.temp_dir_bucket:
            self.add_temp_bucket()

    def ensure_deploy_bucket(self) -> None:
        """Create bucketDeploy unless it already exists. Not transactional."""
        params = compile_bucket_creation_params(self.config)
        bucket = params["Bucket"]
        if self.store.exists(bucket):
            logger.info(f"Bucket {bucket} exists.")
            return
        logger.info(f"Bucket {bucket} doesn't exist, creating it.")
        self.store.create_container(params)
        self.result.bucket_created = True
        logger.info(f"Bucket {bucket} created.")

    def upload_job_script(self, job: GlueJob) -> str:
        """
        Upload a job's script and point the job at the uploaded copy.

        The job-level scriptS3LocationPrefix wins over the service-wide s3Prefix.

        Returns:
            The S3 URI of the staged script

        Raises:
            ConfigError: If neither prefix is set or the script does not exist
        """
        prefix = job.script_s3_location_prefix or self.config.s3_prefix
        if not prefix:
            raise ConfigError(
                f"Job '{job.name}': either scriptS3LocationPrefix or s3Prefix must be specified."
            )

        path = self.config.resolve_path(job.script_path)
        if not path.is_file():
            raise ConfigError(f"Job '{job.name}': script not found: {path}")

        uri = self._put(_Upload(path=path, bucket=self.config.bucket_deploy, key=f"{prefix}{job.script_file_name}"))
        job.stage(uri)
        self.result.uploads.append(uri)
        logger.info(
            f"Uploaded {job.script_file_name} to: {uri}",
            extra={"job": job.name, "event": "script_uploaded"},
        )
        return uri

    def upload_support_files(self, job: GlueJob) -> list[str]:
        """
        Upload a job's support files and wait for every upload to finish.

        Every entry is validated before anything is uploaded. Entries with
        execute_upload false are skipped. A directory uploads its direct child
        files only.

        Returns:
            S3 URIs of the uploaded files, in declaration order

        Raises:
            ConfigError: If an entry is incomplete or its local path does not exist
        """
        support_files = expand_support_files(job)
        if not support_files:
            return []

        logger.info(f"Processing {len(support_files)} support file(s) for job '{job.name}'.")
        for support_file in support_files:
            support_file.validate()

        uploads: list[_Upload] = []
        for support_file in support_files:
            if not support_file.execute_upload:
                logger.info(f"Skipping upload for: {support_file.local_path}")
                self.result.skipped_support_files.append(support_file.local_path)
                continue
            uploads.extend(self._support_file_uploads(support_file))

        if not uploads:
            return []

        workers = min(self.max_upload_workers, len(uploads))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(self._put, upload) for upload in uploads]
        # The pool has joined; re-raise the first failure in declaration order
        uris = [future.result() for future in futures]

        for uri in uris:
            logger.info(
                f"Uploaded support file to: {uri}",
                extra={"job": job.name, "event": "support_file_uploaded"},
            )
        self.result.uploads.extend(uris)
        return uris

    def _support_file_uploads(self, support_file: SupportFile) -> list[_Upload]:
        path = self.config.resolve_path(support_file.local_path)
        if path.is_file():
            logger.info(f"Uploading file: {support_file.local_path}")
            return [_Upload(path=path, bucket=support_file.s3_bucket, key=f"{support_file.s3_prefix}{path.name}")]
        if path.is_dir():
            logger.info(f"Uploading all files in: {support_file.local_path}")
            return [
                _Upload(path=child, bucket=support_file.s3_bucket, key=f"{support_file.s3_prefix}{child.name}")
                for child in sorted(path.iterdir())
                if child.is_file()
            ]
        raise ConfigError(f"Support file path not found: {path}")

    def _put(self, upload: _Upload) -> str:
        self.store.put_object(upload.bucket, upload.key, upload.path.read_bytes())
        return staged_uri(upload.bucket, upload.key)

    def record_job(self, job: GlueJob) -> str:
        """Compile a staged job and append it under its logical id."""
        if job.resource_name:
            logger.info(f"Resource name specified: {job.resource_name}")
            name = to_resource_name(job.resource_name)
        else:
            name = to_resource_name(job.name)
            logger.info(f"Resource name not specified, using job name: {name}")
        _check_reserved(name, f"Job '{job.name}'")

        self.template.append("resources", name, compile_job(job))
        self.result.resources.append(name)
        logger.info(f"Compiled job {job.name} as {name}.", extra={"job": job.name, "event": "job_compiled"})
        return name

    def add_temp_bucket(self) -> str:
        """Add the shared scratch bucket and an output exposing its name."""
        bucket_name = f"{TEMP_BUCKET_NAME_PREFIX}{random_suffix(8)}"
        self.template.append("resources", GLUE_TEMP_BUCKET_REF, compile_bucket(bucket_name))
        self.template.append(
            "outputs",
            GLUE_TEMP_BUCKET_OUTPUT,
            compile_output({"Ref": GLUE_TEMP_BUCKET_REF}, description="Glue jobs temporary bucket"),
        )
        self.result.resources.append(GLUE_TEMP_BUCKET_REF)
        self.result.outputs.append(GLUE_TEMP_BUCKET_OUTPUT)
        logger.info(f"Temp bucket {bucket_name} added as {GLUE_TEMP_BUCKET_REF}.")
        return bucket_name

    # ------------------------------------------------------------------ #
    # Triggers
    # ------------------------------------------------------------------ #

    def process_triggers(self) -> None:
        if not self.config.has_triggers:
            logger.info("Triggers not found.")
            return

        logger.info("Processing Triggers.")
        for trigger in expand_triggers(self.config):
            name = to_resource_name(trigger.name)
            _check_reserved(name, f"Trigger '{trigger.name}'")
            self.template.append("resources", name, compile_trigger(trigger))
            self.result.resources.append(name)


def run_deploy(
    config: Optional[GluePluginConfig],
    store: BlobStoreClient,
    template: Optional[CompiledTemplate] = None,
    max_upload_workers: int = DEFAULT_UPLOAD_WORKERS,
) -> DeployResult:
    """Run one deployment: stage artifacts and compile everything into `template`."""
    return Deployer(config, store, template=template, max_upload_workers=max_upload_workers).run()
