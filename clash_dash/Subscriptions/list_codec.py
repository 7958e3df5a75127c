# list_codec.py
# Description: Encoding of multi-valued UCI list options held in a single string
#
# A list such as the include keywords is carried around as one string of
# single-quoted tokens separated by spaces: `'HK' 'JP' 'US'`.
#
# Decoding picks out every `'...'` span from left to right. There is no escape
# for a quote inside a token, so unbalanced quoting loses the unmatched part:
#   "'a' 'b"    -> ['a']
#   "a b"       -> []
#   "''"        -> []
#
# Imports
import re
from typing import List, Optional, Sequence
#
# Third-Party Imports
from loguru import logger
#
########################################################################################################################
#
# Functions:

logger = logger.bind(module="list_codec")

QUOTED_TOKEN_PATTERN = re.compile(r"'([^']+)'")


def decode_quoted_values(value: Optional[str]) -> List[str]:
    """
    Splits a quoted list string into its tokens.

    Args:
        value: The serialized list, or None when the option is absent.

    Returns:
        Tokens in order of appearance. Empty for None or when nothing is quoted.
    """
    if value is None:
        return []
    tokens = QUOTED_TOKEN_PATTERN.findall(value)
    logger.trace(f"Decoded {len(tokens)} token(s) from {value!r}")
    return tokens


def encode_quoted_values(values: Sequence[str]) -> Optional[str]:
    """
    Serializes tokens into the quoted list form.

    Empty strings are dropped and the rest trimmed. Returns None, not an
    empty string, when no token survives so callers can tell "no list" apart.

    The empty check runs before trimming, so a whitespace-only token encodes
    as `''`, which decodes to no tokens at all.
    """
    tokens = [v.strip() for v in values if v]
    if not tokens:
        return None
    return " ".join(f"'{token}'" for token in tokens)

#
# End of list_codec.py
#######################################################################################################################
