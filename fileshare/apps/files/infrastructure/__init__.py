"""Infrastructure layer for files app.

This package contains integrations with external systems:
- Storage backends for blob content (local disk, S3/MinIO/R2)
- The content store addressing blobs by owner, id and extension
- Content-addressed naming and extension categories
- The I/O worker pool used for timeouts and concurrent removal

Keep infrastructure concerns separate from business logic.
"""
