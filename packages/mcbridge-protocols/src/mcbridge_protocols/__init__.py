"""
Protocol definitions for the mcbridge action system.

This package provides the narrow interfaces the action execution core
consumes from the surrounding host. It has zero dependencies on other
mcbridge-* packages.

Key protocols:
- GameActionProtocol: Interface for pluggable action units
- SessionProviderProtocol: Access to the single shared bot session
- StateProviderProtocol: Read-only view of game state and recent events
"""

from mcbridge_protocols.action import GameActionProtocol
from mcbridge_protocols.session import SessionProviderProtocol, StateProviderProtocol

__all__ = [
    "GameActionProtocol",
    "SessionProviderProtocol",
    "StateProviderProtocol",
]
