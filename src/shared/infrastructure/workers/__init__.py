from .background_worker import BackgroundWorker

__all__ = ['BackgroundWorker']
