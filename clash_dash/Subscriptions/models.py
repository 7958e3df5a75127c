# models.py
# Description: Subscription record model and the value encodings shared by the dump parser and diff engine
#
# Imports
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, List, Any
#
########################################################################################################################
#
# Field vocabulary
#
########################################################################################################################

class SubscriptionField(str, Enum):
    """UCI option names recognized under `@config_subscribe[<n>]`."""
    NAME = "name"
    ADDRESS = "address"
    ENABLED = "enabled"
    SUB_UA = "sub_ua"
    SUB_CONVERT = "sub_convert"
    CONVERT_ADDRESS = "convert_address"
    TEMPLATE = "template"
    EMOJI = "emoji"
    UDP = "udp"
    SKIP_CERT_VERIFY = "skip_cert_verify"
    SORT = "sort"
    NODE_TYPE = "node_type"
    RULE_PROVIDER = "rule_provider"
    KEYWORD = "keyword"
    EX_KEYWORD = "ex_keyword"
    CUSTOM_PARAMS = "custom_params"

    @property
    def attribute(self) -> str:
        """Name of the matching `SubscriptionRecord` attribute."""
        return self.value

    @classmethod
    def lookup(cls, option: str) -> Optional["SubscriptionField"]:
        try:
            return cls(option)
        except ValueError:
            return None


# Rewritten whenever they differ between old and new
SCALAR_FIELDS = (
    SubscriptionField.NAME,
    SubscriptionField.ADDRESS,
    SubscriptionField.SUB_UA,
    SubscriptionField.ENABLED,
    SubscriptionField.SUB_CONVERT,
)

# Conversion sub-options, only meaningful while sub_convert is on
CONVERSION_SWITCHES = (
    SubscriptionField.EMOJI,
    SubscriptionField.UDP,
    SubscriptionField.SKIP_CERT_VERIFY,
    SubscriptionField.SORT,
    SubscriptionField.NODE_TYPE,
    SubscriptionField.RULE_PROVIDER,
)

FLAG_FIELDS = (SubscriptionField.ENABLED, SubscriptionField.SUB_CONVERT)

KEYWORD_FIELDS = (SubscriptionField.KEYWORD, SubscriptionField.EX_KEYWORD)

# Values have their single quotes removed when read from the dump
QUOTE_STRIPPED_FIELDS = (
    SubscriptionField.SUB_UA,
    SubscriptionField.ENABLED,
    SubscriptionField.NAME,
    SubscriptionField.ADDRESS,
)

#
########################################################################################################################
#
# Value encodings
#
########################################################################################################################

def strip_quotes(value: str) -> str:
    return value.replace("'", "")


def decode_flag(value: str) -> bool:
    """`enabled` / `sub_convert` are stored as '1' or '0'."""
    return value == "1"


def encode_flag(value: bool) -> str:
    return "1" if value else "0"


def decode_switch(value: str) -> bool:
    """Conversion sub-options are stored as the strings 'true' / 'false'."""
    return value == "true"


def encode_switch(value: Optional[bool]) -> str:
    # Absent means off
    return "true" if value else "false"


def normalize_field_value(field_name: SubscriptionField, raw_value: str) -> str:
    """Applies the per-field cleanup a raw dump value gets before it is interpreted."""
    value = raw_value.strip()
    if field_name in QUOTE_STRIPPED_FIELDS:
        value = strip_quotes(value)
        if field_name is SubscriptionField.SUB_UA:
            value = value.lower()
    return value

#
########################################################################################################################
#
# Record
#
########################################################################################################################

@dataclass(frozen=True)
class SubscriptionRecord:
    """
    One `config_subscribe` section of the OpenClash UCI package.

    `id` is the section's position in the indexed array and identifies the
    record across fetches. Optional conversion switches keep `None` distinct
    from `False`; `keyword` and `ex_keyword` hold the quoted list form
    (`'a' 'b'`) rather than a Python list.
    """
    id: int
    name: str = ""
    address: str = ""
    enabled: bool = True
    sub_ua: str = "clash"
    sub_convert: bool = False
    convert_address: Optional[str] = None
    template: Optional[str] = None
    emoji: Optional[bool] = None
    udp: Optional[bool] = None
    skip_cert_verify: Optional[bool] = None
    sort: Optional[bool] = None
    node_type: Optional[bool] = None
    rule_provider: Optional[bool] = None
    keyword: Optional[str] = None
    ex_keyword: Optional[str] = None
    custom_params: Optional[List[str]] = field(default=None)

    def get(self, field_name: SubscriptionField) -> Any:
        return getattr(self, field_name.attribute)

    def with_changes(self, **changes: Any) -> "SubscriptionRecord":
        """Returns a copy with `changes` applied; the record itself is never modified."""
        return replace(self, **changes)

#
# End of models.py
#######################################################################################################################
