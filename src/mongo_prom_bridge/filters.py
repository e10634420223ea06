"""
Translation of label matchers and time windows into MongoDB filters.
"""

import logging
from typing import Mapping, Optional

from .exceptions import BadDataError
from .models import CollectionDescriptor
from .utils import seconds_to_datetime

logger = logging.getLogger(__name__)


def build_filter(
    matchers: Mapping[str, str],
    descriptor: CollectionDescriptor,
    start: Optional[float] = None,
    end: Optional[float] = None,
) -> dict:
    """Build a MongoDB filter document for a selector query.

    Each matcher whose label has a field mapping becomes an equality
    constraint on that field. Matchers without a mapping are left out of
    the filter, so the query may return more series than the selector
    names. An empty result matches every document in the collection.

    Args:
        matchers: Label name -> required exact value.
        descriptor: Field layout of the target collection.
        start: Inclusive window start in Unix seconds.
        end: Inclusive window end in Unix seconds.

    Returns:
        Filter document suitable for Collection.find().

    Raises:
        BadDataError: If end is before start.
    """
    query_filter: dict = {}

    for label, value in matchers.items():
        field_name = descriptor.label_fields.get(label)
        if field_name is None:
            logger.debug(
                "Label %r has no field mapping in collection %r, dropping matcher",
                label, descriptor.name,
            )
            continue
        query_filter[field_name] = value

    if start is not None and end is not None:
        if end < start:
            raise BadDataError("end time must not be before start time")
        if descriptor.time_field:
            query_filter[descriptor.time_field] = {
                "$gte": seconds_to_datetime(start),
                "$lte": seconds_to_datetime(end),
            }

    return query_filter
