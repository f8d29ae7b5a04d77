import logging

from apksign.logger import mask_secret, setup_logging


def test_mask_secret_keeps_only_the_edges():
    assert mask_secret("secret123") == "se...23"
    assert mask_secret("secret123", visible_chars=3) == "sec...123"


def test_mask_secret_hides_short_or_empty_secrets():
    assert mask_secret("android") == "an...id"
    assert mask_secret("abcd") == "***"
    assert mask_secret("") == "***"


def test_setup_logging_writes_log_file(tmp_path):
    log_file = tmp_path / "logs" / "apksign.log"
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level

    try:
        setup_logging(level="debug", log_file=log_file, format_string="%(levelname)s %(message)s")
        logging.getLogger("apksign.test").debug("signed app.apk")
        for handler in root.handlers:
            handler.flush()

        assert root.level == logging.DEBUG
        assert "DEBUG signed app.apk" in log_file.read_text()
    finally:
        for handler in root.handlers:
            if isinstance(handler, logging.FileHandler):
                handler.close()
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
