"""Exception types raised by taxonomist."""


class TaxonomistError(Exception):
    """Base class for all taxonomist errors."""


class ConfigurationError(TaxonomistError):
    """A required resource or setting is missing or invalid."""


class QueryCompilationError(TaxonomistError):
    """A rule template or pattern could not be compiled into a query."""

    def __init__(self, message: str, query_text: str | None = None):
        super().__init__(message)
        self.query_text = query_text


class LeafProcessingError(TaxonomistError):
    """Enriching a single ontology leaf file failed."""

    def __init__(self, message: str, leaf_name: str):
        super().__init__(message)
        self.leaf_name = leaf_name
