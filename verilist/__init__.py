"""verilist — a singly-linked stack with checked contracts."""

__version__ = "0.1.0"

from verilist.config import ContractConfig, configure, contract_mode, get_config, load_config
from verilist.contracts import contracts_of
from verilist.errors import (
    BorrowError, ContractViolation, EmptyStackError, ErrorKind, IndexOutOfRange,
    PostconditionViolation, PreconditionViolation, VerilistError,
)
from verilist.int_stack import IntStack
from verilist.link import Link, Node
from verilist.snapshot import snap, structurally_equal
from verilist.stack import HeadBorrow, Stack

__all__ = [
    "BorrowError",
    "ContractConfig",
    "ContractViolation",
    "EmptyStackError",
    "ErrorKind",
    "HeadBorrow",
    "IndexOutOfRange",
    "IntStack",
    "Link",
    "Node",
    "PostconditionViolation",
    "PreconditionViolation",
    "Stack",
    "VerilistError",
    "configure",
    "contract_mode",
    "contracts_of",
    "get_config",
    "load_config",
    "snap",
    "structurally_equal",
]
