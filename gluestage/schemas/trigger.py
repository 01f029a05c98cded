"""
GlueTrigger schema.

Triggers reference jobs by their Glue job name (not the logical id), either
as actions to start or inside a conditional predicate.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from gluestage.errors import ConfigError


TRIGGER_KEYS = ("name", "type", "actions", "schedule", "predicate")

ACTION_KEYS = ("name", "args", "timeout")


class TriggerType(str, Enum):
    """AWS::Glue::Trigger types."""
    SCHEDULED = "SCHEDULED"
    CONDITIONAL = "CONDITIONAL"
    ON_DEMAND = "ON_DEMAND"
    EVENT = "EVENT"

    @classmethod
    def from_string(cls, value: str) -> "TriggerType":
        normalized = str(value).upper().replace("-", "_")
        if normalized == "SCHEDULE":
            normalized = cls.SCHEDULED.value
        try:
            return cls(normalized)
        except ValueError:
            valid = ", ".join(t.value for t in cls)
            raise ConfigError(f"Unknown trigger type '{value}' (expected one of: {valid})")


@dataclass(frozen=True)
class TriggerAction:
    """
    A job started by a trigger.

    Attributes:
        job_name: Glue job name to start
        args: Job arguments for this invocation
        timeout: Run timeout in minutes
        properties: Pass-through action keys (SecurityConfiguration, NotificationProperty, ...)
    """
    job_name: str
    args: Optional[dict[str, Any]] = None
    timeout: Optional[int] = None
    properties: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any], trigger_name: str) -> "TriggerAction":
        if not isinstance(data, dict) or not data.get("name"):
            raise ConfigError(f"Trigger '{trigger_name}': every action needs a job 'name'")
        return cls(
            job_name=str(data["name"]),
            args=data.get("args"),
            timeout=data.get("timeout"),
            properties={k: v for k, v in data.items() if k not in ACTION_KEYS},
        )


@dataclass(frozen=True)
class GlueTrigger:
    """
    A Glue trigger definition.

    Attributes:
        name: Trigger name
        type: Trigger type
        actions: Jobs fired by the trigger, in declaration order
        schedule: Cron expression (SCHEDULED triggers)
        predicate: Job-state conditions (CONDITIONAL triggers), kept verbatim
        properties: Pass-through CloudFormation properties
    """
    name: str
    type: TriggerType
    actions: tuple[TriggerAction, ...]
    schedule: Optional[str] = None
    predicate: Optional[dict[str, Any]] = None
    properties: dict[str, Any] = field(default_factory=dict)

    @property
    def job_names(self) -> list[str]:
        """Names of every job this trigger fires or depends on."""
        names = [a.job_name for a in self.actions]
        for condition in (self.predicate or {}).get("Conditions", []):
            job_name = condition.get("JobName")
            if job_name and job_name not in names:
                names.append(job_name)
        return names

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GlueTrigger":
        """Build a trigger from a `custom.Glue.triggers` entry."""
        if not isinstance(data, dict):
            raise ConfigError(f"Trigger entries must be mappings, got: {data!r}")
        if not data.get("name"):
            raise ConfigError("Trigger: missing 'name'")
        name = str(data["name"])

        trigger_type = TriggerType.from_string(data.get("type", TriggerType.SCHEDULED.value))

        raw_actions = data.get("actions") or []
        if not isinstance(raw_actions, list) or not raw_actions:
            raise ConfigError(f"Trigger '{name}': 'actions' must be a non-empty list")
        actions = tuple(TriggerAction.from_dict(a, name) for a in raw_actions)

        schedule = data.get("schedule")
        if trigger_type is TriggerType.SCHEDULED and not schedule:
            raise ConfigError(f"Trigger '{name}': SCHEDULED triggers require 'schedule'")

        predicate = data.get("predicate")
        if trigger_type is TriggerType.CONDITIONAL and not predicate:
            raise ConfigError(f"Trigger '{name}': CONDITIONAL triggers require 'predicate'")
        if predicate is not None and not isinstance(predicate, dict):
            raise ConfigError(f"Trigger '{name}': 'predicate' must be a mapping")

        return cls(
            name=name,
            type=trigger_type,
            actions=actions,
            schedule=schedule,
            predicate=predicate,
            properties={k: v for k, v in data.items() if k not in TRIGGER_KEYS},
        )
