import logging

from uvicorn.logging import DefaultFormatter


def get_logger(name: str, log_level=logging.INFO):
    logger = logging.getLogger(name)
    if not logger.handlers:
        logger.setLevel(log_level)
        ch = logging.StreamHandler()
        ch.setFormatter(DefaultFormatter(fmt="%(levelprefix)s %(message)s"))
        logger.addHandler(ch)

    return logger


def to_log_level(log_level) -> int:
    """``"debug"`` 같은 레벨 이름을 숫자 레벨로 바꿉니다."""
    if isinstance(log_level, int):
        return log_level
    level = logging.getLevelName(str(log_level).upper())
    if not isinstance(level, int):
        raise ValueError(f"unknown log level: {log_level!r}")
    return level


def set_log_level(log_level, name: str = "fastuow"):
    """``fastuow`` 로 시작하는 모든 로거의 레벨을 변경합니다."""
    log_level = to_log_level(log_level)

    for logger_name in list(logging.root.manager.loggerDict):
        if logger_name == name or logger_name.startswith(name + "."):
            logging.getLogger(logger_name).setLevel(log_level)
