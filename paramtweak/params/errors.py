"""
Error vocabulary for tweak operations.

Every rejected set raises one of these. The message is the text an operator
sees, so it must stand on its own.
"""


class TweakError(Exception):
    """Base class for a rejected parameter set."""

    kind = "tweak"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ParseError(TweakError):
    """Malformed numeric or token syntax."""

    kind = "parse"


class RangeError(TweakError):
    """Value outside the declared [min, max] bounds."""

    kind = "range"


class VocabularyError(TweakError):
    """Word not in the accepted set."""

    kind = "vocabulary"


class LookupFailure(TweakError):
    """Unknown user/group, or a listen token that resolves to nothing."""

    kind = "lookup"


class StructuralError(TweakError):
    """Wrong number of fields in a composite value."""

    kind = "structural"


class InvariantError(TweakError):
    """Cross-field constraint violated."""

    kind = "invariant"


class CapacityError(TweakError):
    """Value does not fit the platform's storage."""

    kind = "capacity"
