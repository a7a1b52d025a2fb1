"""
Exceptions for the protectpath engine
Everything derives from ProtectPathError so callers can catch the whole family
"""


class ProtectPathError(Exception):
    # general container for errors
    pass


class FormatError(ProtectPathError):
    # raised when a container is too small or not block aligned
    pass


class DerivationError(ProtectPathError):
    # raised when key derivation or the random source fails
    pass


class AuthenticationError(ProtectPathError):
    # raised on bad padding after decrypt: wrong password or corrupted data
    pass


class FileAccessError(ProtectPathError):
    # raised when a source cannot be read or a destination cannot be written
    pass


class OverwriteConflictError(FileAccessError):
    # raised when the destination exists and overwrite was not requested
    pass
