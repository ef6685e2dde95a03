"""Configuration module for bintest."""

from bintest.config.builder import BinTestBuilder
from bintest.config.settings import RELEASE_BUILD, BuildConfig, load_config

__all__ = ["BinTestBuilder", "BuildConfig", "RELEASE_BUILD", "load_config"]
