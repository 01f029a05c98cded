"""
CompiledTemplate - append-only collector of CloudFormation fragments.

Fragments are filed under a section ("resources" or "outputs") and a logical
name. Appending the same (section, name) twice keeps the last fragment; this
is how duplicate job names behave and it is left that way on purpose.
"""

import copy
import json
from pathlib import Path
from typing import Any, Optional


SECTIONS = {
    "resources": "Resources",
    "outputs": "Outputs",
}


class CompiledTemplate:
    """
    Accumulates compiled fragments for one run.

    Example:
        template = CompiledTemplate()
        template.append("resources", "Etl1", fragment)
        template.merge_into(base_template)
    """

    def __init__(self):
        self._sections: dict[str, dict[str, dict[str, Any]]] = {key: {} for key in SECTIONS}

    def append(self, section: str, name: str, fragment: dict[str, Any]) -> None:
        """
        File a fragment under (section, name). Last write wins.

        Raises:
            ValueError: If the section is not "resources" or "outputs"
        """
        if section not in self._sections:
            raise ValueError(f"Unknown template section '{section}' (expected one of: {', '.join(SECTIONS)})")
        self._sections[section][name] = fragment

    @property
    def resources(self) -> dict[str, dict[str, Any]]:
        return self._sections["resources"]

    @property
    def outputs(self) -> dict[str, dict[str, Any]]:
        return self._sections["outputs"]

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._sections.values())

    def to_dict(self) -> dict[str, Any]:
        """CloudFormation view of the accumulated fragments; empty sections are omitted."""
        return {
            SECTIONS[key]: copy.deepcopy(entries)
            for key, entries in self._sections.items()
            if entries
        }

    def merge_into(self, base: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """
        Return a copy of `base` with the accumulated fragments merged in.

        Fragments replace base entries with the same logical name.
        """
        merged = copy.deepcopy(base) if base else {}
        for section, entries in self.to_dict().items():
            merged.setdefault(section, {}).update(entries)
        return merged

    def write_json(self, path: Path, base: Optional[dict[str, Any]] = None) -> Path:
        """Write the merged template as JSON."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.merge_into(base), f, indent=2)
            f.write("\n")
        return path
