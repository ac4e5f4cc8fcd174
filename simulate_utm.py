"""
UTM(5,5) Simulation Driver

Loads a universal Turing machine and a tag system from YAML descriptions,
encodes the tag system as the UTM's initial tape, and steps the UTM until it
halts, printing the tape at each step:

    simulate-utm utm machines/utm55.yaml machines/tag_x_aa.yaml --max-steps 500

Any single machine can be run directly, and a tag system's encoding printed:

    simulate-utm run machines/busy_beaver_4.yaml
    simulate-utm encode machines/tag_x_aa.yaml

Execution histories can be saved as numpy arrays with --save-history.
"""

import argparse
import logging
import sys
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

import numpy as np

from machine import Machine
from machine_errors import ConstructionError, MachineError
from machine_loader import load_machine
from rule_table import Append, StateTransition
from tag_system import TagSystem
from turing_machine import HALT_STATE, TuringMachine
from utm_encoder import UTM_SYMBOLS, encode

logger = logging.getLogger(__name__)

# Tag systems have no numbered states
STATE_CODES = {'tag': 0, 'halt': HALT_STATE}


@dataclass
class RunResult:
    """Outcome of run_machine."""
    steps: int = 0
    halted: bool = False
    history: List[Tuple[object, str, object]] = field(default_factory=list)
    content: str = ''


def run_machine(machine: Machine, max_steps: Optional[int] = None, verbose: bool = True,
                choices: Optional[Iterable[int]] = None) -> RunResult:
    """
    Step a machine until it halts.

    Args:
        machine: TuringMachine or TagSystem to run.
        max_steps: Maximum steps before forced stop (None for unlimited).
        verbose: If True, print the configuration before each step.
        choices: Choice indices consumed, in order, by non-deterministic steps.
                 The run stops when a choice is needed and none is left.

    Returns:
        RunResult whose history holds (state, read_symbol, rule) per step.
    """
    choices = iter(choices or ())
    result = RunResult()

    while not machine.is_halted():
        if max_steps is not None and result.steps >= max_steps:
            if verbose:
                print(f"\nReached maximum steps ({max_steps}), stopping.")
            break

        if verbose:
            print(f"{result.steps:<6}{machine.render()}")

        state, read_symbol = machine.current_state, machine.read()
        if machine.is_deterministic():
            rule = machine.execute()
        else:
            choice = next(choices, None)
            if choice is None:
                logger.warning("Step %d is non-deterministic and no choice is left; stopping", result.steps)
                break
            rule = machine.execute(choice)

        result.history.append((state, read_symbol, rule))
        result.steps += 1

    result.halted = machine.is_halted()
    result.content = machine.content
    if verbose:
        print(f"{result.steps:<6}{machine.render()}")
        if result.halted:
            print(f"\nMachine halted after {result.steps} steps.")
    return result


def simulate_tag_system(utm: TuringMachine, tag_system: TagSystem, max_steps: Optional[int] = None,
                        verbose: bool = True) -> RunResult:
    """
    Run a tag system on the universal machine.

    The tag system is encoded, loaded into utm with the head on the encoded
    word, and utm is run.

    Raises:
        ConstructionError: If utm's alphabet lacks a symbol of the encoding.
    """
    missing = [s for s in UTM_SYMBOLS if s not in utm.symbols]
    if missing:
        raise ConstructionError(f"The universal machine has no tape symbols {missing}")
    encoded = encode(tag_system)
    logger.info("Encoded tag system into %d cells, head at %d", len(encoded.tape), encoded.head_index)
    utm.reset(encoded.tape, encoded.head_index)
    return run_machine(utm, max_steps=max_steps, verbose=verbose)


def _state_code(state):
    return STATE_CODES[state] if isinstance(state, str) else int(state)


def history_to_numpy(history, symbols):
    """
    Convert execution history to a numpy array of shape (n_steps, 5).

    Args:
        history: List of (state, read_symbol, rule) from run_machine.
        symbols: Alphabet of the machine; symbols are encoded by their index.

    Returns:
        numpy int16 array with columns [state, read, write, shift, next_state].

    Encoding:
        - Turing machine states are their numbers, halt is -1
        - Tag system states are 0 (running)
        - Halt rules: write = -1, shift = 0, next_state = -1
        - Append rules: write = length of the appended string, shift = 0,
          next_state = 0
    """
    if not history:
        return np.array([], dtype=np.int16).reshape(0, 5)

    symbol_encoding = {symbol: i for i, symbol in enumerate(symbols)}
    arr = np.zeros((len(history), 5), dtype=np.int16)

    for i, (state, read_symbol, rule) in enumerate(history):
        arr[i, 0] = _state_code(state)
        arr[i, 1] = symbol_encoding[read_symbol]
        if isinstance(rule, StateTransition):
            arr[i, 2] = symbol_encoding[rule.next_symbol]
            arr[i, 3] = rule.shift
            arr[i, 4] = rule.next_state
        elif isinstance(rule, Append):
            arr[i, 2] = len(rule.string)
            arr[i, 4] = STATE_CODES['tag']
        else:
            arr[i, 2] = -1
            arr[i, 4] = HALT_STATE

    return arr


def save_history(history, symbols, filepath):
    """Save execution history to a .npy file."""
    arr = history_to_numpy(history, symbols)
    np.save(filepath, arr)
    logger.info("Saved %d history rows to %s", arr.shape[0], filepath)
    return arr


def setup_logging(level='WARNING') -> None:
    """Set up logging configuration."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s [%(levelname)s] %(message)s",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        description="Simulate Turing machines and tag systems, and run tag systems on UTM(5,5)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging level")

    subparsers = parser.add_subparsers(title="commands", dest="command")

    run_options = argparse.ArgumentParser(add_help=False)
    run_options.add_argument("--max-steps", type=int, default=None, help="Stop after this many steps")
    run_options.add_argument("--quiet", action="store_true", help="Do not print each configuration")
    run_options.add_argument("--save-history", type=str, help="Save the executed rules as a .npy array")

    utm_parser = subparsers.add_parser("utm", parents=[run_options], help="Run a tag system on UTM(5,5)")
    utm_parser.add_argument("utm", help="YAML description of the universal Turing machine")
    utm_parser.add_argument("tag_system", help="YAML description of the tag system")

    machine_parser = subparsers.add_parser("run", parents=[run_options], help="Run a single machine")
    machine_parser.add_argument("machine", help="YAML description of the machine")
    machine_parser.add_argument("--choice", type=int, action="append", default=[],
                                help="Choice for the next non-deterministic step (repeatable)")

    encode_parser = subparsers.add_parser("encode", help="Print the UTM(5,5) tape of a tag system")
    encode_parser.add_argument("tag_system", help="YAML description of the tag system")

    return parser


def _expect(machine, machine_class, path):
    if not isinstance(machine, machine_class):
        raise ConstructionError(f"{path} describes a {machine.kind}, expected a {machine_class.kind}")
    return machine


def main(argv=None) -> int:
    """CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    if args.command is None:
        parser.print_help()
        return 1

    try:
        if args.command == "encode":
            tag_system = _expect(load_machine(args.tag_system), TagSystem, args.tag_system)
            encoded = encode(tag_system)
            print(encoded.tape)
            print(f"head index: {encoded.head_index}")
            return 0

        if args.command == "utm":
            utm = _expect(load_machine(args.utm), TuringMachine, args.utm)
            tag_system = _expect(load_machine(args.tag_system), TagSystem, args.tag_system)
            machine = utm
            result = simulate_tag_system(utm, tag_system, max_steps=args.max_steps, verbose=not args.quiet)
        else:
            machine = load_machine(args.machine)
            result = run_machine(machine, max_steps=args.max_steps, verbose=not args.quiet,
                                 choices=args.choice)
    except MachineError as e:
        logger.error("%s", e)
        return 1

    print(f"Steps: {result.steps}, halted: {result.halted}")
    if args.save_history:
        save_history(result.history, machine.symbols, args.save_history)
    return 0


if __name__ == "__main__":
    sys.exit(main())
