"""
ABOUTME: Merges adjacent runs sharing identical properties
ABOUTME: Word splits text into many runs (revision ids, spell checks...); merging restores searchable text
"""

import logging
from dataclasses import dataclass, fields
from typing import Any, List, Mapping, Optional, Union

from .errors import ConfigurationError
from .run import Run

logger = logging.getLogger(__name__)


@dataclass
class MergeOptions:
    """Options for merge_all()"""
    no_caps: bool = False   # strip <w:caps/> and upper-case literals before merging

    @classmethod
    def from_dict(cls, options: Optional[Mapping[str, Any]]) -> 'MergeOptions':
        """
        Build options from a mapping of names to values.

        Raises:
            ConfigurationError: for unknown option names or non-boolean values
        """
        options = dict(options or {})
        valid_names = {f.name for f in fields(cls)}
        invalid = sorted(set(options) - valid_names)
        if invalid:
            raise ConfigurationError(f"merge_runs(): invalid arg(s): {', '.join(invalid)}")
        for name, value in options.items():
            if not isinstance(value, (bool, int)):
                raise ConfigurationError(
                    f"merge_runs(): arg '{name}' should be a boolean, got {value!r}"
                )
        return cls(**{name: bool(value) for name, value in options.items()})


def merge_all(runs: List[Run],
              options: Union[MergeOptions, Mapping[str, Any], None] = None) -> List[Run]:
    """
    Merge every run into the previous one when possible.

    A run is merged into the last accumulated run iff there is no markup
    between them and both have byte-identical properties. The runs received
    are not modified; merged runs are fresh copies.

    Args:
        runs: Runs in document order
        options: MergeOptions, or a mapping such as {'no_caps': True}

    Returns:
        New list of runs
    """
    if not isinstance(options, MergeOptions):
        options = MergeOptions.from_dict(options)

    new_runs: List[Run] = []
    n_merged = 0
    for run in runs:
        run = run.copy()
        if options.no_caps:
            run.remove_caps_property()

        if new_runs and new_runs[-1].can_absorb(run):
            new_runs[-1].merge(run)
            n_merged += 1
        else:
            new_runs.append(run)

    logger.debug("[Merge] %d runs -> %d runs (%d merged)", len(runs), len(new_runs), n_merged)
    return new_runs
