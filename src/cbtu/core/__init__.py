"""
Comic archive repacking modules
漫画压缩包转 .cbt 的核心模块
"""

from .batch import BatchOutcome, convert, convert_file, convert_tree
from .classifier import ClassifierState, is_excluded
from .config import RepackConfig, load_config
from .predicates import is_comic, is_image
from .repack import RepackError, RepackResult, pack, repack_archive

__all__ = [
    'BatchOutcome',
    'ClassifierState',
    'RepackConfig',
    'RepackError',
    'RepackResult',
    'convert',
    'convert_file',
    'convert_tree',
    'is_comic',
    'is_excluded',
    'is_image',
    'load_config',
    'pack',
    'repack_archive',
]
