"""
Error taxonomy for the analytics layer.

Every report surfaces failures as one of these kinds. Views render them as
``{'error': <message>, 'code': <CODE>}`` with the status code carried by the
exception class.
"""

import logging
from functools import wraps

logger = logging.getLogger(__name__)


class AnalyticsError(Exception):
    """Base class for errors raised while assembling a report."""
    code = 'ANALYTICS_ERROR'
    status_code = 400
    default_message = 'Analytics request failed'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def as_response_data(self):
        return {'error': self.message, 'code': self.code}


class InvalidDateFormat(AnalyticsError):
    """Raised when a date or preset query parameter cannot be understood."""
    code = 'INVALID_DATE_FORMAT'

    def __init__(self, field, value=None, message=None):
        self.field = field
        self.value = value
        if message is None:
            message = f"Invalid {field} format"
            if value not in (None, ''):
                message = f"{message}: {value!r}"
        super().__init__(message)

    def as_response_data(self):
        data = super().as_response_data()
        data['field'] = self.field
        return data


class MissingParameter(AnalyticsError):
    """Raised when a required query parameter is absent."""
    code = 'MISSING_PARAMETER'

    def __init__(self, parameter, message=None):
        self.parameter = parameter
        super().__init__(message or f"{parameter} is required")


class InvalidParameter(AnalyticsError):
    """Raised when a selector such as ``sort_by`` or ``group_by`` has an unknown value."""
    code = 'INVALID_PARAMETER'

    def __init__(self, parameter, value, choices=()):
        self.parameter = parameter
        message = f"Invalid value {value!r} for {parameter}"
        if choices:
            message = f"{message}. Valid values: {', '.join(choices)}"
        super().__init__(message)


class AllocationError(AnalyticsError):
    """Raised when a field-size split cannot be derived for an expenditure."""
    code = 'ALLOCATION_ERROR'
    default_message = 'Expenditure cannot be allocated across the selected crops'


class ResourceNotFound(AnalyticsError):
    """Raised when a referenced record does not exist for the requesting user."""
    code = 'NOT_FOUND'
    status_code = 404
    default_message = 'Resource not found'


class AggregationFailure(AnalyticsError):
    """Raised for any unexpected failure while querying or computing a report."""
    code = 'AGGREGATION_FAILURE'
    status_code = 500
    default_message = 'Failed to compute analytics'

    def __init__(self, message=None, cause=None):
        self.cause = cause
        super().__init__(message)


def report_operation(name):
    """
    Decorator for report assemblers.

    Taxonomy errors propagate untouched. Anything else is logged with its
    traceback and re-raised as AggregationFailure chained to the cause.
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except AnalyticsError:
                raise
            except Exception as exc:
                logger.exception("Report %s failed", name)
                raise AggregationFailure(
                    f"Failed to fetch {name} data", cause=exc
                ) from exc
        return wrapper
    return decorator
