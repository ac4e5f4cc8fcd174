"""
Stepping contract shared by TuringMachine and TagSystem, and selection of the
engine that matches a description.
"""

from typing import Optional, Protocol, Union

from machine_errors import ConstructionError
from tag_system import TagSystem, TagSystemDescription
from turing_machine import TuringMachine, TuringMachineDescription


class Machine(Protocol):
    kind: str
    symbols: tuple

    @property
    def current_state(self): ...

    @property
    def content(self) -> str: ...

    @property
    def head_index(self) -> int: ...

    def read(self) -> str: ...

    def reset(self, content: str, head: int = 0) -> None: ...

    def is_deterministic(self) -> bool: ...

    def is_halted(self) -> bool: ...

    def execute(self, choice: Optional[int] = None): ...

    def render(self) -> str: ...


Description = Union[TuringMachineDescription, TagSystemDescription]


def build_machine(description: Description) -> Machine:
    """
    Build the engine matching a description.

    Raises:
        ConstructionError: If the description is inconsistent or of an
                           unknown kind.
    """
    if isinstance(description, TuringMachineDescription):
        return TuringMachine(description)
    if isinstance(description, TagSystemDescription):
        return TagSystem(description)
    raise ConstructionError(f"Unknown machine description: {type(description).__name__}")
