"""Test helpers for dinepick tests.

Helpers:
    FakeTimeAuthority: Controllable time authority for deterministic tests
    plan_builders: Factories for plans, invites and candidates

Usage:
    from tests.helpers import FakeTimeAuthority
"""

from tests.helpers.fake_time_authority import FakeTimeAuthority

__all__ = ["FakeTimeAuthority"]
