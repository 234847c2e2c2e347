from .dispatcher import CommandDispatcher, turn_result
from .wire import parse_command, split_datagram

__all__ = [
    "CommandDispatcher",
    "parse_command",
    "split_datagram",
    "turn_result",
]
