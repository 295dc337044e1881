"""
This mixin class implements operations on boundary markers of a package part: bookmarks and fields.
"""

from typing import List

from . import bookmarks, fields
from .fields import FieldRecord, FieldTransform


class BoundaryMixin:
    # ============================================================
    # Bookmarks
    # ============================================================

    def suppress_bookmarks(self, **options):
        """
        Suppress bookmarks according to name policies.

        Args:
            full_range: names whose markers and inner content are erased
            markup_only: names whose markers only are erased
            strict_orphans: raise on a bookmark end without start

        Policies are exact names, compiled regexes, callables or lists of
        those. Without any policy, the markup of all bookmarks is erased.
        """
        self._check_option_names('suppress_bookmarks', options,
                                 ('full_range', 'markup_only', 'strict_orphans'))
        self.contents = bookmarks.suppress_bookmarks(self.contents, **options)

    def reveal_bookmarks(self, **marking_args):
        """Insert visible, highlighted marks at bookmark boundaries (see BookmarkMarker)."""
        self.contents = bookmarks.reveal_bookmarks(self.contents, **marking_args)

    # ============================================================
    # Fields
    # ============================================================

    def list_fields(self) -> List[FieldRecord]:
        """Top-level fields of the contents, nested fields folded into them."""
        return [record for record in fields.resolve_fields(self.contents, self.embedded_field_format)
                if record.is_field]

    def replace_fields(self, field_replacer: FieldTransform):
        """Replace each field by field_replacer(code, result)."""
        self.contents = fields.rewrite_fields(self.contents, field_replacer, self.embedded_field_format)

    def reveal_fields(self):
        self.contents = fields.reveal_fields(self.contents, self.embedded_field_format)

    def unlink_fields(self):
        self.contents = fields.unlink_fields(self.contents)
