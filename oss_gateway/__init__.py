"""Gateway service package: chunked uploads and bucket policy templates over S3."""

__version__ = "1.0.0"
