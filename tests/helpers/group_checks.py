"""Membership and leadership checks for group coordinator tests.

Usage:
    assert_groups_consistent(system.groups, system.agents)
"""

from __future__ import annotations

import sys
import os
from typing import Mapping

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from horde.ai.flocking import GroupCoordinator
from horde.core.models import Agent


def assert_groups_consistent(coord: GroupCoordinator, agents: Mapping[int, Agent]) -> None:
    """Every group non-empty, led by a member, and each agent in at most one group."""
    seen: set[int] = set()
    for group in coord.groups.values():
        assert group.members, f"group {group.id} is empty"
        assert group.leader_id in group.members, f"group {group.id} leader not a member"
        for mid in group.members:
            assert mid not in seen, f"agent #{mid} in more than one group"
            seen.add(mid)
            member = agents.get(mid)
            assert member is None or member.group_id == group.id, f"agent #{mid} disagrees with group {group.id}"
    for agent in agents.values():
        if agent.group_id is not None:
            assert agent.group_id in coord.groups, f"agent #{agent.id} points at missing group {agent.group_id}"
