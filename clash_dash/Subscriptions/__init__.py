# __init__.py
# Subscriptions module - OpenClash config subscription synchronization
#
# This module provides:
# - The subscription record model and its UCI value encodings
# - Parsing of `uci show` subscription dumps
# - Diffing of records into ordered `uci` commands
# - The quoted list codec used by keyword options
# - The fetch / edit / commit orchestration
#

from .models import SubscriptionRecord, SubscriptionField
from .list_codec import decode_quoted_values, encode_quoted_values
from .dump_parser import parse_subscription_dump, parse_template_listing
from .diff_engine import (
    Command,
    CommandOp,
    diff_subscriptions,
    render_command,
    build_batch_command,
    build_commit_command,
)
from .subscription_manager import SubscriptionManager

__all__ = [
    # Model
    'SubscriptionRecord',
    'SubscriptionField',

    # List codec
    'decode_quoted_values',
    'encode_quoted_values',

    # Parsing
    'parse_subscription_dump',
    'parse_template_listing',

    # Diffing
    'Command',
    'CommandOp',
    'diff_subscriptions',
    'render_command',
    'build_batch_command',
    'build_commit_command',

    # Orchestration
    'SubscriptionManager',
]
