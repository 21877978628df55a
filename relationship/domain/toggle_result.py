from dataclasses import dataclass


@dataclass(frozen=True)
class ToggleResult:
    active: bool
