"""
Farm analytics services module

Report assemblers live in ``farm_analytics``; the date-range resolver,
grouping engine and metrics they compose are importable on their own.
"""

from .exceptions import (
    AnalyticsError,
    AggregationFailure,
    AllocationError,
    InvalidDateFormat,
    InvalidParameter,
    MissingParameter,
    ResourceNotFound,
)

__all__ = [
    'AnalyticsError',
    'AggregationFailure',
    'AllocationError',
    'InvalidDateFormat',
    'InvalidParameter',
    'MissingParameter',
    'ResourceNotFound',
]
