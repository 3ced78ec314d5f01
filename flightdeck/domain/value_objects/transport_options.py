"""
Transport Options Value Object

Architectural Intent:
- Options scoped to one transport instance (never shared across hosts)
- Merge precedence: call-site over scoped over defaults
- Merging produces a new instance; the scoped set is restored by the caller
"""

from dataclasses import dataclass, fields, replace
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class TransportOptions:
    silent: bool = False
    failsafe: bool = False

    def merge(
        self, overrides: Optional[Mapping[str, Any]] = None, **kwargs: Any
    ) -> "TransportOptions":
        """Return a copy with known, non-None keys replaced."""
        known = {f.name for f in fields(self)}
        merged = {**(overrides or {}), **kwargs}
        changes = {
            k: bool(v) for k, v in merged.items() if k in known and v is not None
        }
        return replace(self, **changes) if changes else self
