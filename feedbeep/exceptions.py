from typing import List


class FeedbeepError(Exception):
    """Base class for pipeline errors."""


class ConfigurationError(FeedbeepError):
    """Required credentials or endpoints are missing. Raised before a run starts."""


class FetchError(FeedbeepError):
    """Every feed provider failed; the batch is aborted."""

    def __init__(self, failures: List[str]):
        self.failures = failures
        super().__init__("All feed providers failed: " + "; ".join(failures))


class ArticleValidationError(FeedbeepError):
    """An article reached the deduplication gate without its required fields."""

    def __init__(self, missing: List[str]):
        self.missing = missing
        super().__init__(f"Missing required fields: {', '.join(missing)}")
