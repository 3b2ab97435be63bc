"""
Constants used across the cbtu repacking modules
定义 cbtu 转换模块中使用的常量
"""

# 视为漫画页的图片扩展名
IMAGE_EXTENSIONS = ('.jpg', '.jpeg', '.png', '.webp')

# 少见格式，匹配时会记录日志以便审查
RARE_IMAGE_EXTENSIONS = ('.bmp', '.gif', '.tga')

# 目录模式下会被转换的压缩包扩展名
COMIC_EXTENSIONS = ('.cbr', '.cbz', '.cbt', '.rar', '.zip', '.tar')

ZIP_EXTENSIONS = ('.zip', '.cbz')
RAR_EXTENSIONS = ('.rar', '.cbr')
TAR_EXTENSIONS = ('.tar', '.cbt')
SEVENZIP_EXTENSIONS = ('.7z', '.cb7')

TARGET_EXTENSION = '.cbt'

# 已知的发布组水印/广告图片文件名片段 (大小写不敏感)
DEFAULT_DENYLIST = (
    "zzz-nahga-empire.jpg",
    "page.jpg",
    "page (newcomic.org).jpg",
    "zzz LDK6 zzz",
    "zzz K6 V1 zzz",
    "z_pitt",
    "zzZone2",
    "zSoU-Nerd",
    "zzzDQzzz",
    "zWater",
    "zzzNeverAngel-Empire",
)

# 文件名前缀/后缀关键词
EXCLUDED_PREFIXES = ('zz', 'z_', 'xxxx')
EXCLUDED_STEM_SUFFIXES = ('tag',)

# 分类器阈值
MIN_DIGIT_COUNT = 2
MAX_TIME_GAP_SECONDS = 20 * 24 * 3600
SIMILAR_LENGTH_DELTA = 2
MAX_LENGTH_DELTA = 5
DIGIT_SUFFIX_LENGTH_DELTA = 7

# .cbt 中条目的权限位
TAR_ENTRY_MODE = 0o666
