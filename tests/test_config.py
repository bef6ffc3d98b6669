import json
import logging
import os

import pytest

from command_spool.config import SpoolConfig, build_store, configure_logging
from command_spool.spool import DEFAULT_SPOOL_SUBDIR


def test_defaults():
    config = SpoolConfig({'vardir': '/var/lib/agent'})

    assert config.vardir == '/var/lib/agent'
    assert config.spool_subdir == DEFAULT_SPOOL_SUBDIR
    assert config.log_level == 'INFO'


def test_vardir_is_required():
    with pytest.raises(KeyError):
        SpoolConfig({})


def test_from_file_and_build_store(tmp_path):
    config_path = tmp_path / "spool.json"
    config_path.write_text(json.dumps({
        'vardir': str(tmp_path / "vardir"),
        'spool_subdir': 'outbox',
        'log_level': 'DEBUG'
    }))

    config = SpoolConfig.from_file(str(config_path))
    store = build_store(config)

    assert config.log_level == 'DEBUG'
    assert store.resolve_directory() == os.path.join(str(tmp_path), "vardir", "outbox")


def test_apply_logging_sets_root_level():
    root = logging.getLogger()
    old_level = root.level
    old_handlers = list(root.handlers)
    try:
        SpoolConfig({'vardir': '/var/lib/agent', 'log_level': 'WARNING'}).apply_logging()
        assert root.level == logging.WARNING

        configure_logging('DEBUG')
        assert root.level == logging.DEBUG
    finally:
        for handler in root.handlers[:]:
            if handler not in old_handlers:
                root.removeHandler(handler)
        root.setLevel(old_level)
