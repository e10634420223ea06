"""
Tolerant decoding of raw MongoDB documents into metric samples.

Store data is assumed imperfect. A missing or malformed timestamp falls
back to the current time, a missing or malformed value falls back to "0",
and both are reported through the module logger rather than failing the
query.
"""

import logging
import math
from datetime import datetime
from typing import Any, Callable, Mapping, Optional

import bson
from bson.codec_options import CodecOptions
from bson.errors import BSONError
from bson.raw_bson import RawBSONDocument

from .models import CollectionDescriptor, MetricSample
from .utils import datetime_to_seconds, now_seconds, parse_rfc3339

logger = logging.getLogger(__name__)

METRIC_NAME_LABEL = "__name__"
DEFAULT_VALUE = "0"

# Options for decoding one raw document; datetimes stay naive UTC.
DOCUMENT_CODEC_OPTIONS = CodecOptions()


def format_value(value: int | float) -> str:
    """Render a number the way Prometheus renders sample values."""
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "+Inf" if value > 0 else "-Inf"
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        return repr(value)
    return str(value)


def is_numeric_text(text: str) -> bool:
    """Whether text parses as a floating point number as written."""
    if not text or text != text.strip() or "_" in text:
        return False
    try:
        float(text)
    except ValueError:
        return False
    return True


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _label_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if _is_number(value):
        return format_value(value)
    return str(value)


def _from_datetime(value: Any) -> Optional[float]:
    if isinstance(value, datetime):
        return datetime_to_seconds(value)
    return None


def _from_rfc3339(value: Any) -> Optional[float]:
    if isinstance(value, str):
        return parse_rfc3339(value)
    return None


def _from_epoch_float(value: Any) -> Optional[float]:
    if isinstance(value, float) and math.isfinite(value):
        return value
    return None


def _from_epoch_int(value: Any) -> Optional[float]:
    if _is_number(value) and isinstance(value, int):
        return float(value)
    return None


# Tried in order; the first parser returning a number wins.
TIMESTAMP_PARSERS: tuple[Callable[[Any], Optional[float]], ...] = (
    _from_datetime,
    _from_rfc3339,
    _from_epoch_float,
    _from_epoch_int,
)


def extract_timestamp(document: Mapping[str, Any], descriptor: CollectionDescriptor) -> float:
    """
    Get the sample timestamp of a document in Unix seconds.

    Args:
        document: Raw store document.
        descriptor: Field layout of the collection.

    Returns:
        Timestamp in seconds, or the current time when the field is
        missing or cannot be interpreted.
    """
    if descriptor.time_field not in document:
        logger.warning(
            "Time field %r not found, using current time", descriptor.time_field
        )
        return now_seconds()

    raw = document[descriptor.time_field]
    for parser in TIMESTAMP_PARSERS:
        try:
            timestamp = parser(raw)
        except (ValueError, OverflowError, OSError):
            continue
        if timestamp is not None:
            return timestamp

    logger.warning(
        "Could not interpret time value %r (%s) in field %r, using current time",
        raw, type(raw).__name__, descriptor.time_field,
    )
    return now_seconds()


def extract_value(document: Mapping[str, Any], descriptor: CollectionDescriptor) -> str:
    """
    Get the sample value of a document as decimal text.

    Args:
        document: Raw store document.
        descriptor: Field layout of the collection.

    Returns:
        Value text; "0" when the field is missing or not numeric.
    """
    if descriptor.value_field not in document:
        logger.warning(
            "Value field %r not found, using default %r",
            descriptor.value_field, DEFAULT_VALUE,
        )
        return DEFAULT_VALUE

    raw = document[descriptor.value_field]
    if _is_number(raw):
        return format_value(raw)

    text = raw if isinstance(raw, str) else str(raw)
    if not isinstance(raw, bool) and is_numeric_text(text):
        return text

    logger.warning(
        "Non-numeric value %r (%s) in field %r, using default %r",
        raw, type(raw).__name__, descriptor.value_field, DEFAULT_VALUE,
    )
    return DEFAULT_VALUE


def extract_labels(document: Mapping[str, Any], descriptor: CollectionDescriptor) -> dict[str, str]:
    """
    Build the label set of a document.

    Default labels come first, then mapped document fields overwrite
    them, then the metric field sets __name__.

    Args:
        document: Raw store document.
        descriptor: Field layout of the collection.

    Returns:
        Label name -> label value text.
    """
    labels = dict(descriptor.default_labels)

    for label, field_name in descriptor.label_fields.items():
        if field_name in document:
            labels[label] = _label_text(document[field_name])

    if descriptor.metric_field and descriptor.metric_field in document:
        labels[METRIC_NAME_LABEL] = _label_text(document[descriptor.metric_field])
    elif METRIC_NAME_LABEL not in labels:
        logger.warning(
            "Metric field %r not found and no default %s label set",
            descriptor.metric_field, METRIC_NAME_LABEL,
        )

    return labels


def decode_document(document: Any, descriptor: CollectionDescriptor) -> Optional[MetricSample]:
    """
    Decode one store document into a MetricSample.

    Field-level problems never fail the document; defaults are
    substituted instead. A raw BSON document that cannot be decoded, or
    anything that is not a mapping at all, is skipped.

    Args:
        document: Raw store document, either a RawBSONDocument straight
            from the cursor or an already decoded mapping.
        descriptor: Field layout of the collection.

    Returns:
        MetricSample, or None if the document has to be skipped.
    """
    if isinstance(document, RawBSONDocument):
        try:
            document = bson.decode(document.raw, codec_options=DOCUMENT_CODEC_OPTIONS)
        except (BSONError, ValueError, OverflowError) as e:
            logger.warning("Skipping undecodable document: %s", e)
            return None

    if not isinstance(document, Mapping):
        logger.warning("Skipping document of type %s", type(document).__name__)
        return None

    return MetricSample(
        timestamp=extract_timestamp(document, descriptor),
        value=extract_value(document, descriptor),
        labels=extract_labels(document, descriptor),
    )
