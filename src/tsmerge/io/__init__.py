from .file_worker import FileWorker

__all__ = ['FileWorker']
