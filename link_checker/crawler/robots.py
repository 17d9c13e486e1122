"""
robots.txt rules for LinkChecker.

Only consulted when a run is configured to honour robots.txt; the default
audit crawl ignores it.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

_WILDCARD_RE = re.compile(r"[*$]")


@dataclass
class _Group:
    agents: List[str] = field(default_factory=list)
    rules: List[Tuple[bool, str]] = field(default_factory=list)


class RobotsTxtRules:
    """Parsed robots.txt; longest matching rule wins, Allow wins ties."""

    def __init__(self, text: str) -> None:
        self._groups: List[_Group] = []
        self._patterns: Dict[str, re.Pattern[str]] = {}
        self._parse(text)

    def can_fetch(self, user_agent: str, path: str) -> bool:
        group = self._match_group(user_agent)
        if group is None:
            return True
        best_len = -1
        allowed = True
        for allow, pattern in group.rules:
            if not self._matches(pattern, path):
                continue
            length = len(_WILDCARD_RE.sub("", pattern))
            if length > best_len or (length == best_len and allow):
                best_len = length
                allowed = allow
        return allowed

    def _parse(self, text: str) -> None:
        current: Optional[_Group] = None
        for raw in text.splitlines():
            line = raw.split("#", 1)[0].strip()
            if not line or ":" not in line:
                continue
            key, _, value = line.partition(":")
            key = key.strip().lower()
            value = value.strip()
            if key == "user-agent":
                # consecutive User-agent lines share one group
                if current is None or current.rules:
                    current = _Group()
                    self._groups.append(current)
                current.agents.append(value.lower())
            elif key in ("allow", "disallow"):
                if current is None:
                    current = _Group(agents=["*"])
                    self._groups.append(current)
                if key == "disallow" and not value:
                    continue
                current.rules.append((key == "allow", value))

    def _match_group(self, user_agent: str) -> Optional[_Group]:
        ua = user_agent.lower()
        for group in self._groups:
            if any(agent != "*" and ua.startswith(agent) for agent in group.agents):
                return group
        for group in self._groups:
            if "*" in group.agents:
                return group
        return None

    def _matches(self, pattern: str, path: str) -> bool:
        if pattern not in self._patterns:
            regex = re.escape(pattern).replace(r"\*", ".*")
            if regex.endswith(r"\$"):
                regex = regex[:-2] + "$"
            self._patterns[pattern] = re.compile(regex)
        return self._patterns[pattern].match(path) is not None
