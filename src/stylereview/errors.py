"""Exception taxonomy for the review pipeline."""

from __future__ import annotations


class StyleReviewError(Exception):
    """Base class for all StyleReview errors."""


class ParseError(StyleReviewError):
    """Reference document is not well-formed structured content."""


class DocumentLoadError(StyleReviewError):
    """Reference document could not be read or fetched."""


class EmbeddingError(StyleReviewError):
    """Embedding provider failed (network, quota, bad response)."""


class ReviewError(StyleReviewError):
    """Failure confined to a single changed file."""


class MetadataParseError(ReviewError):
    """Commit reference missing from a file's metadata URL."""


class InsufficientContextError(ReviewError):
    """No style-guide passages available for a grounded prompt."""


class EmptyGenerationError(ReviewError):
    """Language model returned no usable text."""


class GenerationError(ReviewError):
    """Language model request failed."""


class PublishError(ReviewError):
    """Posting a generated comment failed."""


class GitHubError(StyleReviewError):
    """Pull request metadata could not be fetched."""
