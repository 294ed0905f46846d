from .logging import LoggerLikeProtocol, MergeLoggerProtocol
from .processor import MergeProcessorProtocol

__all__ = [
    'LoggerLikeProtocol',
    'MergeLoggerProtocol',
    'MergeProcessorProtocol',
]
