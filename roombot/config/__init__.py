"""Configuration module for RoomBot."""

from roombot.config.loader import load_config, save_config, get_config_path
from roombot.config.schema import Config

__all__ = ["Config", "load_config", "save_config", "get_config_path"]
