"""
AudienceProfile — the parsed audience extraction response.

Expected shape (extra keys are ignored, missing ones become empty):

    {"Profile": {"tpid": "...", "pid": "...",
                 "Audiences": {"Audience": [{"id": "...", "abbr": "..."}]}}}

A single audience may arrive as an object instead of a one-element list.
"""

import json
from dataclasses import dataclass
from typing import Any, Tuple


@dataclass(frozen=True)
class Audience:
    id: str
    abbreviation: str = ""

    @classmethod
    def from_json(cls, data):
        return cls(id=str(data.get("id", "")), abbreviation=str(data.get("abbr", "")))


@dataclass(frozen=True)
class AudienceProfile:
    pid: str = ""
    tpid: str = ""
    audiences: Tuple[Audience, ...] = ()
    raw: Any = None

    @classmethod
    def from_json(cls, value):
        profile = value.get("Profile") if isinstance(value, dict) else None
        if not isinstance(profile, dict):
            return cls(raw=value)

        entries = profile.get("Audiences")
        entries = entries.get("Audience", []) if isinstance(entries, dict) else []
        if isinstance(entries, dict):
            entries = [entries]

        return cls(
            pid=str(profile.get("pid") or ""),
            tpid=str(profile.get("tpid") or ""),
            audiences=tuple(Audience.from_json(a) for a in entries if isinstance(a, dict)),
            raw=value,
        )

    @property
    def audience_ids(self):
        return [a.id for a in self.audiences]

    @property
    def json_string(self) -> str:
        return json.dumps(self.raw)
