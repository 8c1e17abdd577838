from __future__ import annotations

from typing import Optional

from splitmint.config import get_settings
from splitmint.models import Group
from splitmint.services.errors import InvalidArgumentError


def validate_group(group: Group, max_members: Optional[int] = None) -> Group:
    limit = max_members if max_members is not None else get_settings().max_group_members

    if not group.name or not group.name.strip():
        raise InvalidArgumentError("group name must not be empty")
    if len(group.members) > limit:
        raise InvalidArgumentError(
            f"groups can have a maximum of {limit} participants (including the owner)"
        )
    ids = group.member_ids
    if len(set(ids)) != len(ids):
        raise InvalidArgumentError("group member ids must be unique")
    for member in group.members:
        if not member.name or not member.name.strip():
            raise InvalidArgumentError(f"member {member.member_id!r} has no name")
    return group
