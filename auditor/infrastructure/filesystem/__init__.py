"""Filesystem infrastructure module."""
from .directory_manager import DirectoryManager
from .file_reader import FileReader
from .file_writer import FileWriter

__all__ = [
    'DirectoryManager',
    'FileReader',
    'FileWriter',
]
