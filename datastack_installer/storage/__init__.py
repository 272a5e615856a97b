# Path and File Name : /home/datastack/rebuild/datastack_installer/storage/__init__.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Storage and metastore initialization package initialization

from .metastore_initializer import MetastoreInitializer
from .storage_initializer import StorageInitializer

__all__ = ['MetastoreInitializer', 'StorageInitializer']
