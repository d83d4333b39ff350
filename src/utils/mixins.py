import structlog


class LoggerMixin:
    """Give a class a structlog logger named after it.

    The logger is bound with the defining module so that records from the
    Gemini client and the mock can be told apart in ``logs/glossa.log``.
    """

    @property
    def logger(self) -> structlog.stdlib.BoundLogger:
        cls = type(self)
        logger: structlog.stdlib.BoundLogger = structlog.get_logger(cls.__name__)
        return logger.bind(component=cls.__module__)
