# diff_engine.py
# Description: Computes the `uci` mutations that turn one subscription record into another
#
# Update policies differ per option:
# - name, address, sub_ua, enabled, sub_convert are set only when changed
# - with conversion on, convert_address/template are set when changed, and
#   all six conversion switches are rewritten on every change
# - list options are deleted and re-added element by element
#
# The commands are returned in the order the remote shell must run them.
#
# Imports
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence
#
# Third-Party Imports
from loguru import logger
#
# Local Imports
from .list_codec import decode_quoted_values
from .models import (
    CONVERSION_SWITCHES,
    FLAG_FIELDS,
    KEYWORD_FIELDS,
    SCALAR_FIELDS,
    SubscriptionField,
    SubscriptionRecord,
    encode_flag,
    encode_switch,
)
#
########################################################################################################################
#
# Commands

logger = logger.bind(module="diff_engine")

DEFAULT_UCI_PACKAGE = "openclash"


class CommandOp(str, Enum):
    SET = "set"
    DELETE = "delete"
    ADD_LIST = "add_list"


@dataclass(frozen=True)
class Command:
    """A single mutation of one option of a subscription section."""
    op: CommandOp
    field: SubscriptionField
    value: Optional[str] = None

    @classmethod
    def set(cls, field: SubscriptionField, value: str) -> "Command":
        return cls(CommandOp.SET, field, value)

    @classmethod
    def delete(cls, field: SubscriptionField) -> "Command":
        return cls(CommandOp.DELETE, field)

    @classmethod
    def add_list(cls, field: SubscriptionField, value: str) -> "Command":
        return cls(CommandOp.ADD_LIST, field, value)


def option_path(record_id: int, field: SubscriptionField, package: str = DEFAULT_UCI_PACKAGE) -> str:
    return f"{package}.@config_subscribe[{record_id}].{field.value}"


def quote_value(value: str) -> str:
    """Single-quotes a value for the router shell; embedded quotes become `'\\''`."""
    return "'" + value.replace("'", "'\\''") + "'"


def render_command(command: Command, record_id: int, package: str = DEFAULT_UCI_PACKAGE) -> str:
    """Renders a command as the `uci` invocation the router runs."""
    path = option_path(record_id, command.field, package)
    if command.op is CommandOp.DELETE:
        return f"uci delete {path}"
    return f"uci {command.op.value} {path}={quote_value(command.value)}"


def build_batch_command(commands: Sequence[Command], record_id: int, package: str = DEFAULT_UCI_PACKAGE) -> str:
    """Joins rendered commands into one shell line that stops at the first failure."""
    return " && ".join(render_command(command, record_id, package) for command in commands)


def build_commit_command(package: str = DEFAULT_UCI_PACKAGE) -> str:
    return f"uci commit {package}"

#
########################################################################################################################
#
# Diffing

def _scalar_commands(old: SubscriptionRecord, new: SubscriptionRecord) -> List[Command]:
    commands = []
    for field in SCALAR_FIELDS:
        new_value = new.get(field)
        if old.get(field) == new_value:
            continue
        if field in FLAG_FIELDS:
            new_value = encode_flag(new_value)
        commands.append(Command.set(field, new_value))
    return commands


def _conversion_option_commands(old: SubscriptionRecord, new: SubscriptionRecord) -> List[Command]:
    if not new.sub_convert:
        return []

    commands = []
    for field in (SubscriptionField.CONVERT_ADDRESS, SubscriptionField.TEMPLATE):
        new_value = new.get(field)
        if old.get(field) != new_value and new_value is not None:
            commands.append(Command.set(field, new_value))
    return commands


def _conversion_switch_commands(new: SubscriptionRecord) -> List[Command]:
    # Absent switches are written as 'false'
    return [Command.set(field, encode_switch(new.get(field))) for field in CONVERSION_SWITCHES]


def _keyword_commands(field: SubscriptionField, old: SubscriptionRecord, new: SubscriptionRecord) -> List[Command]:
    old_value = old.get(field)
    new_value = new.get(field)
    if old_value == new_value:
        return []

    tokens = decode_quoted_values(new_value)
    if not tokens:
        # Deleted even when the option never existed remotely
        return [Command.delete(field)]

    commands = []
    if old_value is not None:
        commands.append(Command.delete(field))
    commands.extend(Command.add_list(field, token) for token in tokens)
    return commands


def _custom_param_commands(old: SubscriptionRecord, new: SubscriptionRecord) -> List[Command]:
    field = SubscriptionField.CUSTOM_PARAMS
    if old.custom_params == new.custom_params or new.custom_params is None:
        return []

    commands = []
    if old.custom_params is not None:
        commands.append(Command.delete(field))
    commands.extend(Command.add_list(field, param) for param in new.custom_params)
    return commands


def diff_subscriptions(old: SubscriptionRecord, new: SubscriptionRecord) -> List[Command]:
    """
    Computes the commands that bring a remote section holding `old` to `new`.

    Args:
        old: The record as last fetched from the router.
        new: The edited record.

    Returns:
        Commands in execution order. An empty list means nothing needs to be sent.

    While conversion is enabled on `new`, any difference between the records
    rewrites all six conversion switches, even when it produces no other
    command (a cleared template). Identical records produce no commands.
    """
    head = _scalar_commands(old, new) + _conversion_option_commands(old, new)
    tail = []
    for field in KEYWORD_FIELDS:
        tail += _keyword_commands(field, old, new)
    tail += _custom_param_commands(old, new)

    switches = []
    if new.sub_convert and old != new:
        switches = _conversion_switch_commands(new)

    commands = head + switches + tail
    logger.debug(f"Subscription {new.id}: {len(commands)} change command(s)")
    return commands


def has_changes(commands: Sequence[Command]) -> bool:
    return len(commands) > 0

#
# End of diff_engine.py
#######################################################################################################################
