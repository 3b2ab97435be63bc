"""Repack comic archives into .cbt files while filtering junk pages."""

from .core import (
	BatchOutcome,
	ClassifierState,
	RepackConfig,
	RepackError,
	RepackResult,
	convert,
	is_comic,
	is_excluded,
	is_image,
	load_config,
	pack,
	repack_archive,
)

__all__ = [
	"BatchOutcome",
	"ClassifierState",
	"RepackConfig",
	"RepackError",
	"RepackResult",
	"convert",
	"is_comic",
	"is_excluded",
	"is_image",
	"load_config",
	"pack",
	"repack_archive",
]
