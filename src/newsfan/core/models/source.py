#!/usr/bin/env python3
"""
Source data model.
"""

from dataclasses import dataclass
from typing import Dict, Any


@dataclass(frozen=True)
class Source:
    """A configured news origin, addressed upstream by its opaque id."""
    id: str
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'name': self.name}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Source':
        """Create Source from a catalog descriptor ``{id, name}``."""
        source_id = str(data.get('id') or '').strip()
        if not source_id:
            raise ValueError(f"Source descriptor without id: {data!r}")
        name = str(data.get('name') or source_id).strip()
        return cls(id=source_id, name=name)

    def __str__(self):
        return self.id
