"""Configuration for the command spool"""

import json
import logging

from command_spool.spool import DEFAULT_SPOOL_SUBDIR, SpoolStore

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'


class SpoolConfig:
    """Configuration read from a plain dict"""

    def __init__(self, config_dict):
        # Where the spool lives
        self.vardir = config_dict['vardir']
        self.spool_subdir = config_dict.get('spool_subdir', DEFAULT_SPOOL_SUBDIR)

        # Logging
        self.log_level = config_dict.get('log_level', 'INFO')

    def apply_logging(self):
        """Set up process-wide logging at the configured level"""
        configure_logging(self.log_level)

    @classmethod
    def from_file(cls, path):
        """Load configuration from a JSON file"""
        with open(path, 'r', encoding='utf-8') as f:
            return cls(json.load(f))


def configure_logging(level='INFO'):
    """Process-wide logging setup. Call once from the entry point."""
    logging.basicConfig(format=LOG_FORMAT)
    # basicConfig skips the level when handlers already exist
    logging.getLogger().setLevel(level)


def build_store(config: SpoolConfig) -> SpoolStore:
    return SpoolStore(config.vardir, config.spool_subdir)
