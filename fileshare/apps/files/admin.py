"""Django admin configuration for files app."""

from django.contrib import admin, messages
from django.db.models import QuerySet
from django.http import HttpRequest

from fileshare.apps.files.infrastructure.categories import categorize
from fileshare.apps.files.infrastructure.content_store import get_content_store
from fileshare.apps.files.logic.listing_operations import (
    format_size,
    format_upload_date,
    minutes_left,
)
from fileshare.apps.files.logic.metadata_operations import current_minute
from fileshare.apps.files.logic.removal_operations import remove_file
from fileshare.apps.files.models import FileRecord


@admin.register(FileRecord)
class FileRecordAdmin(admin.ModelAdmin):
    """Admin interface for FileRecord model.

    Records are created by uploads only, so the admin is read-only
    apart from the removal action, which deletes blob and record
    together like an expiry would.
    """

    list_display = [
        'file_name',
        'owner',
        'target',
        'category_display',
        'size_display',
        'uploaded_display',
        'minutes_left_display',
    ]

    list_filter = [
        'extension',
        'owner',
    ]

    search_fields = [
        'file_name',
        'hash_id',
        'owner__username',
        'target__username',
    ]

    readonly_fields = [
        'hash_id',
        'file_name',
        'extension',
        'owner',
        'target',
        'uploaded_at',
    ]

    actions = ['remove_selected_files']

    fieldsets = (
        ('File Information', {
            'fields': ('file_name', 'extension', 'hash_id'),
        }),
        ('Sharing', {
            'fields': ('owner', 'target'),
        }),
        ('Timestamps', {
            'fields': ('uploaded_at',),
        }),
    )

    def has_add_permission(self, request: HttpRequest) -> bool:
        """Records only come from uploads.

        Args:
            request: HTTP request.

        Returns:
            Always False.
        """
        return False

    def has_delete_permission(
        self,
        request: HttpRequest,
        obj: FileRecord | None = None,
    ) -> bool:
        """Plain deletes would leave the blob behind; use the action.

        Args:
            request: HTTP request.
            obj: Record being deleted, if any.

        Returns:
            Always False.
        """
        return False

    def category_display(self, obj: FileRecord) -> str:
        """Display the coarse file category."""
        return categorize(obj.extension)
    category_display.short_description = 'Category'  # type: ignore[attr-defined]

    def size_display(self, obj: FileRecord) -> str:
        """Display blob size in human-readable format.

        Args:
            obj: FileRecord instance.

        Returns:
            Formatted size string, 'N/A' when the blob is missing.
        """
        size = get_content_store().size_of(
            obj.owner.username,
            obj.hash_id,
            obj.extension,
        )
        return format_size(size)
    size_display.short_description = 'Size'  # type: ignore[attr-defined]

    def uploaded_display(self, obj: FileRecord) -> str:
        """Display the upload time in the active locale."""
        return format_upload_date(obj.uploaded_at)
    uploaded_display.short_description = 'Uploaded'  # type: ignore[attr-defined]

    def minutes_left_display(self, obj: FileRecord) -> int:
        """Display minutes until the file expires."""
        return minutes_left(obj.uploaded_at, current_minute())
    minutes_left_display.short_description = 'Minutes left'  # type: ignore[attr-defined]

    def remove_selected_files(
        self,
        request: HttpRequest,
        queryset: QuerySet[FileRecord],
    ) -> None:
        """Remove selected files from content and metadata stores.

        Args:
            request: HTTP request.
            queryset: Selected records.
        """
        removed = 0
        failed = []
        for record in list(queryset.select_related('owner')):
            status = remove_file(
                record.owner.username,
                record.hash_id,
                record.extension,
            )
            if status.succeeded:
                removed += 1
            else:
                failed.append(f'{record.file_name} ({status.value})')

        self.message_user(request, f'Removed {removed} files')
        if failed:
            self.message_user(
                request,
                'Failed to remove: {0}'.format(', '.join(failed)),
                level=messages.ERROR,
            )
    remove_selected_files.short_description = 'Remove selected files'  # type: ignore[attr-defined]

    def get_queryset(self, request: HttpRequest) -> QuerySet[FileRecord]:
        """Optimize queryset with select_related.

        Args:
            request: HTTP request.

        Returns:
            Optimized QuerySet.
        """
        return super().get_queryset(request).select_related('owner', 'target')
