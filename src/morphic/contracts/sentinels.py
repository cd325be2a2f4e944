"""Shared sentinel values.

MISSING distinguishes "key not present" from "key present with value None"
when reading raw data and change maps.

NOT_LOADED is the placeholder a data layer puts in a relation attribute it
has not fetched. It is never a real change: the caster drops it, the filters
pass it through (or nullify it on request) and the required validator treats
it as blank.

Example usage:
    from morphic.contracts.sentinels import MISSING, NOT_LOADED

    value = changes.get(field, MISSING)
    if value is MISSING:
        # Field was not present in the changes
        ...
"""

from typing import Final


class MissingSentinel:
    """Sentinel class to distinguish missing fields from None values.

    This is a singleton - use the MISSING instance, not the class directly.
    Comparison should always use `is` identity, never equality.
    """

    __slots__ = ()

    def __repr__(self) -> str:
        return "<MISSING>"

    def __bool__(self) -> bool:
        return False


class NotLoaded:
    """Placeholder for a relation that has not been loaded.

    This is a singleton - use the NOT_LOADED instance.
    """

    __slots__ = ()

    def __repr__(self) -> str:
        return "<NOT_LOADED>"


MISSING: Final[MissingSentinel] = MissingSentinel()
"""Singleton sentinel indicating a key was not found.

Use identity comparison: `if value is MISSING:`
"""

NOT_LOADED: Final[NotLoaded] = NotLoaded()
"""Singleton placeholder for an unloaded relation.

Use identity comparison: `if value is NOT_LOADED:`
"""
