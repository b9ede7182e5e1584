"""
Application Errors

Exception taxonomy shared by the receipts pipeline, the service layer and the
Flask routes. Routes map these onto HTTP status codes:

- ValidationError     -> 400 (bad request input, no retry)
- NotFoundError       -> 404 (entity id does not exist)
- MailConnectionError -> 502 (IMAP connect/fetch failure, no automatic retry)
- PersistenceError    -> logged per item in batches, 500 for single operations
- ParseError          -> recorded on the offending item, never aborts a batch
"""


class ValidationError(ValueError):
    """Missing or malformed request input."""


class NotFoundError(LookupError):
    """Requested entity does not exist."""


class ParseError(Exception):
    """A PDF, CSV or text payload could not be decoded."""


class MailConnectionError(ConnectionError):
    """The mail source could not be reached or a fetch failed."""


class PersistenceError(Exception):
    """A write to the ledger store failed."""
