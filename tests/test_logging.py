import logging

from app.core.logging import LogContext, current_context, get_logger, mask_email


class Capture(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


def test_mask_email():
    assert mask_email("asha.rao@example.com") == "as***@example.com"
    assert mask_email("not-an-email") == "not-an-email"


def test_get_logger_namespace():
    assert get_logger("app.services.otp_service").name == "livabhi.app.services.otp_service"


def test_log_context_nests_and_resets():
    logger = get_logger("tests.context")
    handler = Capture()
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)

    try:
        with LogContext(telegram_user_id=42):
            with LogContext(state="AWAITING_PRICE"):
                logger.info("inner")
                assert current_context() == {"telegram_user_id": 42, "state": "AWAITING_PRICE"}
            logger.info("outer")
        logger.info("after")
    finally:
        logger.removeHandler(handler)

    inner, outer, after = handler.records
    assert (inner.telegram_user_id, inner.state) == (42, "AWAITING_PRICE")
    assert outer.telegram_user_id == 42 and not hasattr(outer, "state")
    assert not hasattr(after, "telegram_user_id")
    assert current_context() == {}
