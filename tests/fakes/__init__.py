"""
Test Fakes Module

Minimal implementations of the planner's collaborator ports.
"""

from tests.fakes.fake_behavior import RecordingBehavior
from tests.fakes.fake_factory import FakeComponentFactory

__all__ = [
    "FakeComponentFactory",
    "RecordingBehavior",
]
