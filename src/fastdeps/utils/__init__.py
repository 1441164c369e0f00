"""Shared helpers."""

from fastdeps.utils.io import dump_json, write_text_atomic
from fastdeps.utils.logger import setup_logging

__all__ = ["dump_json", "setup_logging", "write_text_atomic"]
