import logging
import threading

from sidecar.logging.sink import SidecarLogger


class TestSidecarLogger:
    def test_log_to_all_loggers(self):
        first, second = [], []
        logger = SidecarLogger().add_logger(first.append).add_logger(second.append)

        logger.log("Warming 3 instance(s) of SC-app-testing-Resize.")

        assert first == ["[Sidecar] Warming 3 instance(s) of SC-app-testing-Resize."]
        assert second == first

    def test_sublog_is_restored(self):
        lines = []
        logger = SidecarLogger().add_logger(lines.append)

        with logger.sublog():
            logger.log("outer")
            with logger.sublog():
                logger.log("inner")
            logger.log("still nested")
        logger.log("top")

        assert lines == [
            "          ↳ outer",
            "          ↳ inner",
            "          ↳ still nested",
            "[Sidecar] top",
        ]

    def test_sublog_is_thread_local(self):
        lines = []
        logger = SidecarLogger().add_logger(lines.append)

        with logger.sublog():
            thread = threading.Thread(target=logger.log, args=("from thread",))
            thread.start()
            thread.join()

        assert lines == ["[Sidecar] from thread"]

    def test_without_loggers(self):
        SidecarLogger().log("nobody listens")

    def test_clear(self):
        lines = []
        logger = SidecarLogger().add_logger(lines.append)

        logger.clear()
        logger.log("dropped")

        assert lines == []

    def test_forward_to_logging(self, caplog):
        logger = SidecarLogger().add_logging_logger(logging.getLogger("sidecar.tests"))

        with caplog.at_level(logging.INFO, logger="sidecar.tests"):
            logger.log("Deploying Resize.")

        assert "[Sidecar] Deploying Resize." in caplog.messages
