"""
Exception taxonomy

Invalid transitions are not exceptions: session operations return an
ignored OperationResult instead.
"""


class GameError(Exception):
    """Base class for game controller errors"""


class LoadError(GameError):
    """Board document could not be fetched or parsed"""


class InvalidBoardError(LoadError):
    """Board document parsed but its shape is unusable"""
