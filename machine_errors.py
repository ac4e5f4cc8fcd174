"""
Error types raised while building and stepping machines.

ConstructionError is raised once, while a machine (or its tape) is being
built from a description. OperationError subclasses are raised by the
stepping operation; every one of them can be avoided by checking
is_halted() / is_deterministic() first.
"""


class MachineError(Exception):
    """Base class for every error raised by the simulator."""


class ConstructionError(MachineError, ValueError):
    """A machine description, rule or tape content is inconsistent."""


class OperationError(MachineError):
    """A step was requested that the machine cannot perform."""


class AlreadyHalted(OperationError):
    """The machine has already reached its halt state."""


class ChoiceRequired(OperationError):
    """The current key has several candidate rules and no choice was given."""


class ChoiceNotApplicable(OperationError):
    """A choice was given although the current key has a single rule."""


class ChoiceOutOfRange(OperationError):
    """The choice index does not name one of the candidate rules."""
