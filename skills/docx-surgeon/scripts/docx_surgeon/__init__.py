"""
ABOUTME: Regex-based surgery on WordprocessingML (run merging, text replacement, fields, bookmarks)
"""

from .bookmarks import BookmarkMarker, NamePolicy, reveal_bookmarks, suppress_bookmarks
from .change import Change, ChangeTracker, RevisionCounter
from .decomposer import decompose, serialize
from .errors import ConfigurationError, StructuralMismatchError, SurgeonError
from .fields import FieldRecord, resolve_fields, reveal_fields, rewrite_fields, unlink_fields
from .merger import MergeOptions, merge_all
from .noise import reduce_all_noises, reduce_noise
from .package_part import PackagePart
from .pipeline import decompose_only, merge_only, transform
from .replacer import ReplacedFragment, TextReplacer, replace
from .run import Run
from .surgeon import Surgeon
from .text import Text

__all__ = [
    'BookmarkMarker', 'Change', 'ChangeTracker', 'ConfigurationError', 'FieldRecord',
    'MergeOptions', 'NamePolicy', 'PackagePart', 'ReplacedFragment', 'RevisionCounter',
    'Run', 'StructuralMismatchError', 'Surgeon', 'SurgeonError', 'Text', 'TextReplacer',
    'decompose', 'decompose_only', 'merge_all', 'merge_only', 'reduce_all_noises',
    'reduce_noise', 'replace', 'resolve_fields', 'reveal_bookmarks', 'reveal_fields',
    'rewrite_fields', 'serialize', 'suppress_bookmarks', 'transform', 'unlink_fields',
]
