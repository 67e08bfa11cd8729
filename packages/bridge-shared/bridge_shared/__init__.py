"""
Bridge Shared

Ambient stack shared by the planner packages: exceptions, logging, configuration.
"""

__version__ = "0.1.0"
