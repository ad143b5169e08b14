from .bin_storage import BinStorage
from .memory_bin_storage import MemoryBinStorage
from .peewee_bin_storage import PeeweeBinStorage

__all__ = [
    'BinStorage',
    'MemoryBinStorage',
    'PeeweeBinStorage'
]
