"""Weight normalization for tonnage jobs.

Weigh-ticket weights have been stored in several shapes over the life of
the system. This module turns any of them into a list of Decimals:

1. ``None`` -> ``[]``
2. An already-normalized list/tuple -> each element converted
3. A single number -> one-element list
4. A bracket-delimited JSON array string (``"[12.5, 7.5]"``)
5. A whitespace-separated string (``"12.5 7.5"``)

Tokens that do not parse as finite, non-negative numbers are dropped and
reported in ``dropped_tokens``; the parser never raises. Supporting a new
encoding means adding a shape here, nothing in the calculator changes.
"""

import json
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, List

from trucking_billing.models.fields import coerce_decimal

logger = logging.getLogger(__name__)


class WeightShape(str, Enum):
    """The encoding a weight value was recognized as."""

    EMPTY = "empty"
    LIST = "list"
    SCALAR = "scalar"
    JSON_ARRAY = "json_array"
    WHITESPACE = "whitespace"
    UNKNOWN = "unknown"


@dataclass
class WeightParseResult:
    """Result of parsing a raw weight value.

    Attributes:
        values: Parsed weights, in input order
        dropped_tokens: String form of every token that was discarded
        shape: Encoding the input was recognized as
    """

    values: List[Decimal] = field(default_factory=list)
    dropped_tokens: List[str] = field(default_factory=list)
    shape: WeightShape = WeightShape.EMPTY

    @property
    def total(self) -> Decimal:
        """Sum of the parsed weights (0 when empty)."""
        return sum(self.values, Decimal("0"))


def _convert_tokens(tokens: List[Any], shape: WeightShape) -> WeightParseResult:
    result = WeightParseResult(shape=shape)
    for token in tokens:
        value = coerce_decimal(token)
        if value is None or value < 0:
            result.dropped_tokens.append(str(token))
        else:
            result.values.append(value)
    return result


def _looks_like_json_array(text: str) -> bool:
    return text.startswith("[") and text.endswith("]")


def parse_weight(value: Any) -> WeightParseResult:
    """Parse a raw weight value in any supported encoding.

    Args:
        value: Weight as stored on the job record

    Returns:
        WeightParseResult with parsed values and dropped tokens

    Example:
        >>> parse_weight("[12.5,7.5]").values
        [Decimal('12.5'), Decimal('7.5')]
        >>> result = parse_weight("12.5 n/a 7.5")
        >>> result.total, result.dropped_tokens
        (Decimal('20.0'), ['n/a'])
    """
    if value is None:
        return WeightParseResult(shape=WeightShape.EMPTY)

    if isinstance(value, (list, tuple)):
        return _convert_tokens(list(value), WeightShape.LIST)

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return WeightParseResult(shape=WeightShape.EMPTY)

        if _looks_like_json_array(text):
            try:
                decoded = json.loads(text, parse_float=Decimal)
            except ValueError:
                logger.debug(f"Weight {text!r} is not valid JSON, splitting on whitespace")
            else:
                if isinstance(decoded, list):
                    return _convert_tokens(decoded, WeightShape.JSON_ARRAY)

        return _convert_tokens(text.split(), WeightShape.WHITESPACE)

    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return _convert_tokens([value], WeightShape.SCALAR)

    return WeightParseResult(dropped_tokens=[str(value)], shape=WeightShape.UNKNOWN)


def normalize_weight(value: Any) -> List[Decimal]:
    """Normalize a raw weight value to a list of Decimals.

    Example:
        >>> normalize_weight("12.5 7.5")
        [Decimal('12.5'), Decimal('7.5')]
        >>> normalize_weight(None)
        []
    """
    return parse_weight(value).values
