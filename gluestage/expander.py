"""
Expand the resolved plugin configuration into jobs, triggers and support files.

Order is preserved everywhere: resources are compiled in declaration order,
and when two jobs resolve to the same logical id the later one wins.
"""

import logging
from typing import Any

from gluestage.compiler import GLUE_TEMP_BUCKET_REF
from gluestage.config import GluePluginConfig
from gluestage.schemas import GlueJob, GlueTrigger, SupportFile

logger = logging.getLogger(__name__)


def _temp_dir_location(job: GlueJob, config: GluePluginConfig) -> Any:
    """
    Resolve the --TempDir value for a job that asked for a scratch area.

    A configured tempDirBucket is used directly; otherwise the location points
    at the bucket synthesized by the deployer after all jobs are processed.
    """
    if not job.temp_dir:
        return None
    if config.temp_dir_bucket:
        return f"s3://{config.temp_dir_bucket}/{config.temp_dir_s3_prefix}{job.name}"
    return {
        "Fn::Join": ["", ["s3://", {"Ref": GLUE_TEMP_BUCKET_REF}, f"/{job.name}"]],
    }


def expand_jobs(config: GluePluginConfig) -> list[GlueJob]:
    """
    Build the jobs declared in the configuration.

    Each call returns fresh GlueJob objects, so staging in one run never
    leaks into another.
    """
    jobs = []
    for entry in config.jobs:
        job = GlueJob.from_dict(entry)
        job.temp_dir_location = _temp_dir_location(job, config)
        jobs.append(job)
    logger.debug(f"Expanded {len(jobs)} job(s)")
    return jobs


def expand_triggers(config: GluePluginConfig) -> list[GlueTrigger]:
    """Build the triggers declared in the configuration."""
    triggers = [GlueTrigger.from_dict(entry) for entry in config.triggers]
    logger.debug(f"Expanded {len(triggers)} trigger(s)")
    return triggers


def expand_support_files(job: GlueJob) -> list[SupportFile]:
    """Support files of a job, empty when none are declared."""
    return [SupportFile.from_dict(entry) for entry in job.support_files]
