import json
import logging

import pytest

from depthcrawl.utils.config import LoggingConfig
from depthcrawl.utils.logger import JSONFormatter, get_crawler_logger, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_file_logging_format(tmp_path, restore_root_logger):
    log_file = tmp_path / 'crawl.log'
    setup_logging(LoggingConfig(), str(log_file))

    logging.getLogger('depthcrawl.test').info("Successful URL: https://site.test/a")
    logging.getLogger('depthcrawl.test').error("URL Not Found: https://site.test/b")
    for handler in logging.getLogger().handlers:
        handler.flush()

    lines = log_file.read_text(encoding='utf-8').splitlines()
    assert lines[-2].endswith("] [INFO] Successful URL: https://site.test/a")
    assert lines[-1].endswith("] [ERROR] URL Not Found: https://site.test/b")
    # [YYYY-mm-dd HH:MM:SS]
    assert lines[-1][0] == '[' and lines[-1][20] == ']'


def test_adapter_binds_context(caplog):
    caplog.set_level(logging.INFO)
    logger = get_crawler_logger('depthcrawl.test', worker='worker-0').bind(worker='worker-1')

    logger.info("hello", extra={'url': "https://site.test/a"})

    record = caplog.records[-1]
    assert record.worker == 'worker-1'
    assert record.url == "https://site.test/a"


def test_json_formatter_includes_context():
    record = logging.LogRecord('depthcrawl', logging.ERROR, __file__, 1, "URL Not Found: %s",
                               ("https://site.test/x",), None)
    record.url = "https://site.test/x"

    entry = json.loads(JSONFormatter().format(record))

    assert entry['level'] == 'ERROR'
    assert entry['message'] == "URL Not Found: https://site.test/x"
    assert entry['url'] == "https://site.test/x"
