"""Business logic layer for files app.

This package contains all business logic for the shared file lifecycle:
- Upload, with content-addressed naming and a single recipient
- Access control, path resolution and recipient listings
- Removal from both stores and scheduled expiry sweeps

All business logic should be implemented here, separate from
models (data layer) and infrastructure (external systems).

Reference: https://github.com/dry-python
for decoupling business logic from Django views.
"""
