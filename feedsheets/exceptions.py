from http.client import responses as _STATUS_REASONS


class FeedsheetsException(Exception):
    """Base Exception for all other feedsheets exceptions

    This is intended to make catching exceptions from this library easier.
    """


class HttpError(FeedsheetsException):
    """ The spreadsheets feed answered with an HTTP error status """
    def __init__(self, status, body, message=None):
        self.status = status
        self.body = body
        if message is None:
            reason = _STATUS_REASONS.get(status, 'Unknown')
            message = 'HTTP error {}: {}. {}'.format(status, reason, body)
        super(HttpError, self).__init__(message)


class InvalidCredentials(HttpError):
    """ The feed rejected the credentials attached to the request (HTTP 401) """
    def __init__(self, body):
        super(InvalidCredentials, self).__init__(
            401, body, message='Invalid authorization key. {}'.format(body)
        )


class PrivateSheet(FeedsheetsException):
    """ An HTML page came back instead of a feed; the sheet needs authentication """


class NoResponse(FeedsheetsException):
    """ A feed call that must return a document came back empty """


class WorksheetNotFound(FeedsheetsException):
    """ Trying to open non-existent worksheet """


class BatchUpdateFailed(FeedsheetsException):
    """One or more entries of a batch cell update were rejected

    Attributes:
        failures (list): One ``(batch_id, code, reason)`` tuple per rejected entry
    """
    def __init__(self, failures):
        self.failures = failures
        details = ', '.join('{} ({} {})'.format(*failure) for failure in failures)
        super(BatchUpdateFailed, self).__init__('Batch update failed for cells: {}'.format(details))
