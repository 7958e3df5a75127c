# dump_parser.py
# Description: Parses the `uci show` dump of OpenClash subscription sections into records
#
# The router is asked for
#     uci show openclash | grep "config_subscribe" | sed 's/openclash\.//g' | sort
# which yields one line per option:
#     @config_subscribe[0].name='Work'
#     @config_subscribe[0].keyword='HK' 'JP'
#     @config_subscribe[1].name='Home'
#
# Lines are grouped by their bracketed index. A record closes when the index
# changes, so the dump is expected to be sorted, but the order of options
# inside one index does not matter.
#
# Imports
import re
from dataclasses import dataclass
from functools import reduce
from itertools import groupby
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple, Any
#
# Third-Party Imports
from loguru import logger
#
# Local Imports
from .list_codec import decode_quoted_values
from .models import (
    SubscriptionField,
    SubscriptionRecord,
    decode_flag,
    decode_switch,
    normalize_field_value,
)
#
########################################################################################################################
#
# Line parsing

logger = logger.bind(module="dump_parser")

# The package prefix is normally removed upstream by sed; accept it anyway
SUBSCRIPTION_KEY_PATTERN = re.compile(r"^(?:[\w-]+\.)?@config_subscribe\[(\d+)\](?:\.(\w+))?$")


@dataclass(frozen=True)
class DumpEntry:
    """
    One `key=value` line belonging to a subscription section.

    `field` is None for the section header line (`@config_subscribe[0]=config_subscribe`)
    and for options outside the known vocabulary; such entries still mark
    their index as present but set nothing.
    """
    index: int
    field: Optional[SubscriptionField]
    value: str


def parse_dump_line(line: str) -> Optional[DumpEntry]:
    """
    Parses a single dump line.

    Returns None for lines without `=` and for keys that are not under
    `@config_subscribe[<n>]`.
    """
    key, sep, raw_value = line.partition("=")
    if not sep:
        return None

    match = SUBSCRIPTION_KEY_PATTERN.match(key.strip())
    if match is None:
        return None

    index = int(match.group(1))
    option = match.group(2)
    field_name = SubscriptionField.lookup(option) if option else None
    if field_name is None:
        if option:
            logger.debug(f"Ignoring unrecognized subscription option: {key.strip()}")
        return DumpEntry(index=index, field=None, value=raw_value.strip())

    return DumpEntry(
        index=index,
        field=field_name,
        value=normalize_field_value(field_name, raw_value),
    )


def iter_dump_entries(lines: Iterable[str]) -> Iterator[DumpEntry]:
    for line in lines:
        entry = parse_dump_line(line)
        if entry is not None:
            yield entry


def group_entries(entries: Iterable[DumpEntry]) -> Iterator[Tuple[int, List[DumpEntry]]]:
    """Yields `(index, entries)` for each run of consecutive entries sharing an index."""
    for index, run in groupby(entries, key=lambda entry: entry.index):
        yield index, list(run)

#
########################################################################################################################
#
# Field handlers
#
# Each handler takes the value accumulated so far for its attribute and the
# cleaned raw value, and returns the new attribute value.

FieldHandler = Callable[[Any, str], Any]


def _verbatim(_current: Any, value: str) -> str:
    return value


def _flag(_current: Any, value: str) -> bool:
    return decode_flag(value)


def _switch(_current: Any, value: str) -> bool:
    return decode_switch(value)


def _joined_keywords(current: Optional[str], value: str) -> str:
    # One line per list element upstream; accumulate into a single quoted string
    value = value.strip()
    if current is None:
        return value
    return f"{current} {value}"


def _appended_params(current: Optional[List[str]], value: str) -> List[str]:
    params = decode_quoted_values(value)
    if not params and value:
        params = [value]
    return (current or []) + params


FIELD_HANDLERS: Dict[SubscriptionField, FieldHandler] = {
    SubscriptionField.NAME: _verbatim,
    SubscriptionField.ADDRESS: _verbatim,
    SubscriptionField.ENABLED: _flag,
    SubscriptionField.SUB_UA: _verbatim,
    SubscriptionField.SUB_CONVERT: _flag,
    SubscriptionField.CONVERT_ADDRESS: _verbatim,
    SubscriptionField.TEMPLATE: _verbatim,
    SubscriptionField.EMOJI: _switch,
    SubscriptionField.UDP: _switch,
    SubscriptionField.SKIP_CERT_VERIFY: _switch,
    SubscriptionField.SORT: _switch,
    SubscriptionField.NODE_TYPE: _switch,
    SubscriptionField.RULE_PROVIDER: _switch,
    SubscriptionField.KEYWORD: _joined_keywords,
    SubscriptionField.EX_KEYWORD: _joined_keywords,
    SubscriptionField.CUSTOM_PARAMS: _appended_params,
}

#
########################################################################################################################
#
# Record assembly

def _apply_entry(attributes: Dict[str, Any], entry: DumpEntry) -> Dict[str, Any]:
    if entry.field is None:
        return attributes
    attribute = entry.field.attribute
    handler = FIELD_HANDLERS[entry.field]
    updated = dict(attributes)
    updated[attribute] = handler(attributes.get(attribute), entry.value)
    return updated


def build_record(index: int, entries: Iterable[DumpEntry]) -> SubscriptionRecord:
    """Folds the entries of one index into a record; missing options keep their defaults."""
    attributes = reduce(_apply_entry, entries, {})
    return SubscriptionRecord(id=index, **attributes)


def parse_subscription_dump(dump: str) -> List[SubscriptionRecord]:
    """
    Parses a full subscription dump.

    Args:
        dump: Output of the `uci show` command, newline separated.

    Returns:
        Records in the order their index first appears. Lines that do not
        belong to a subscription section are ignored; a section without any
        known option still yields a record with default values.
    """
    records = [
        build_record(index, entries)
        for index, entries in group_entries(iter_dump_entries(dump.split("\n")))
    ]
    logger.debug(f"Parsed {len(records)} subscription(s) from dump")
    return records


def parse_template_listing(listing: str) -> List[str]:
    """Template names, one per non-empty line of the listing."""
    return [line for line in listing.split("\n") if line]

#
# End of dump_parser.py
#######################################################################################################################
