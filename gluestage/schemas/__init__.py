"""
gluestage.schemas - Typed definitions read from the service file.

GlueJob -> staged GlueJob -> AWS::Glue::Job fragment
GlueTrigger -> AWS::Glue::Trigger fragment
SupportFile -> uploaded next to its job, never compiled
"""

from .job import (
    GlueJob,
    GlueVersion,
    JobType,
    SupportFile,
)
from .trigger import (
    GlueTrigger,
    TriggerAction,
    TriggerType,
)

__all__ = [
    # Jobs
    "GlueJob",
    "GlueVersion",
    "JobType",
    "SupportFile",
    # Triggers
    "GlueTrigger",
    "TriggerAction",
    "TriggerType",
]
