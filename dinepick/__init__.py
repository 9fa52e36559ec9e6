"""
DinePick - Group Dining Decision Core

Coordinates shared meal plans: participants respond to invitations,
swipe on restaurant candidates, and the system resolves exactly one
winning restaurant once the required input has been collected.

Core rules:
- Plan status only moves forward (voting -> confirmed -> completed)
- A tally is deterministic for identical input
- Time-driven transitions are idempotent
- Notification failures never undo a state change
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
