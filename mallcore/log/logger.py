"""
日志配置

基于标准库 logging:
- 根日志器: 控制台 + 按天轮转的文件
- sqlalchemy.engine: 可选的独立 SQL 日志文件
- get_logger(): 按调用模块自动命名
"""

import inspect
import logging
import os
import time
from logging.handlers import TimedRotatingFileHandler
from typing import Any, List, Optional


DEFAULT_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(filename)s:%(lineno)d - %(message)s"
SQL_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

ROOT_NAMESPACE = "mallcore"


class MicrosecondFormatter(logging.Formatter):
    """asctime 精确到微秒，如 2024-01-02 03:04:05.123456"""

    def formatTime(self, record, datefmt=None):
        seconds = time.strftime(datefmt or DEFAULT_DATE_FORMAT, self.converter(record.created))
        micros = int((record.created % 1) * 1_000_000)
        return f"{seconds}.{micros:06d}"


def create_formatter(
    log_format: str = None,
    datefmt: str = DEFAULT_DATE_FORMAT,
    use_microseconds: bool = True,
) -> logging.Formatter:
    formatter_class = MicrosecondFormatter if use_microseconds else logging.Formatter
    return formatter_class(fmt=log_format or DEFAULT_LOG_FORMAT, datefmt=datefmt)


def _rotation_from(config: Any) -> dict:
    """LoggingSettings -> TimedRotatingFileHandler 参数"""
    return dict(
        when=getattr(config, "file_when", "midnight"),
        interval=getattr(config, "file_interval", 1),
        backupCount=getattr(config, "file_backup_count", 7),
        encoding=getattr(config, "file_encoding", "utf-8"),
    )


def _open_file_handler(log_file: str, rotation: Optional[dict]) -> logging.Handler:
    directory = os.path.dirname(log_file)
    if directory:
        os.makedirs(directory, exist_ok=True)
    if not rotation:
        return logging.FileHandler(log_file, encoding="utf-8")
    options = {"when": "midnight", "interval": 1, "backupCount": 7, "encoding": "utf-8"}
    options.update(rotation)
    return TimedRotatingFileHandler(log_file, **options)


def _level_of(level: Any) -> int:
    value = logging.getLevelName(str(level).upper())
    return value if isinstance(value, int) else logging.INFO


def _reset_handlers(target: logging.Logger) -> None:
    # 重复配置同一个日志器时不叠加处理器
    while target.handlers:
        handler = target.handlers[0]
        target.removeHandler(handler)
        handler.close()


def setup_logger(
    name: str = None,
    level: str = "INFO",
    log_file: str = None,
    log_format: str = None,
    console: bool = True,
    use_microseconds: bool = True,
    propagate: bool = True,
    file_handler_options: dict = None,
) -> logging.Logger:
    """配置日志器并返回

    Args:
        name: 日志器名称，为空时配置根日志器
        level: DEBUG / INFO / WARNING / ERROR / CRITICAL，无法识别时按 INFO
        log_file: 日志文件路径，目录不存在时自动创建
        console: 是否输出到 stderr
        file_handler_options: 提供时按时间轮转，键与 TimedRotatingFileHandler 参数一致
            (when / interval / backupCount / encoding)

    使用示例:
        logger = setup_logger("mallcore.services", level="DEBUG", log_file="logs/service.log")
    """
    target = logging.getLogger(name or None)
    target.setLevel(_level_of(level))
    target.propagate = propagate
    _reset_handlers(target)

    handlers: List[logging.Handler] = []
    if console:
        handlers.append(logging.StreamHandler())
    if log_file:
        handlers.append(_open_file_handler(log_file, file_handler_options))

    formatter = create_formatter(log_format, use_microseconds=use_microseconds)
    for handler in handlers:
        handler.setFormatter(formatter)
        target.addHandler(handler)
    return target


def setup_sql_logger(
    level: str = "DEBUG",
    log_file: str = None,
    console: bool = False,
    config: Any = None,
) -> Optional[logging.Logger]:
    """配置 sqlalchemy.engine 日志器，不向根日志器传播

    config.sql_log_enabled 为 False 时不做任何配置并返回 None。
    """
    rotation = None
    if config is not None:
        if not getattr(config, "sql_log_enabled", True):
            return None
        level = getattr(config, "sql_log_level", level)
        log_file = getattr(config, "sql_log_file_path", log_file)
        rotation = _rotation_from(config)

    return setup_logger(
        "sqlalchemy.engine",
        level=level,
        log_file=log_file,
        log_format=SQL_LOG_FORMAT,
        console=console,
        propagate=False,
        file_handler_options=rotation,
    )


def setup_root_logger(
    level: str = "INFO",
    log_file: str = None,
    console: bool = True,
    use_microseconds: bool = True,
    file_handler_options: dict = None,
    config: Any = None,
) -> logging.Logger:
    """配置根日志器，所有 mallcore.* 日志器继承其处理器

    传入 config（LoggingSettings）时以其中的级别、文件和轮转设置为准，
    并按 sql_log_enabled 决定是否同时配置 SQL 日志。

    使用示例:
        setup_root_logger(config=settings.logging)
    """
    if config is not None:
        level = getattr(config, "level", level)
        log_file = getattr(config, "file_path", log_file) or None
        console = getattr(config, "enable_console", console)
        file_handler_options = _rotation_from(config)
        if getattr(config, "sql_log_enabled", False):
            setup_sql_logger(config=config)

    return setup_logger(
        None,
        level=level,
        log_file=log_file,
        console=console,
        use_microseconds=use_microseconds,
        propagate=False,
        file_handler_options=file_handler_options,
    )


def get_logger(name: str = None) -> logging.Logger:
    """获取日志器

    不传名称时取调用方模块的 __name__；不含点号的短名称加上 mallcore. 前缀。

    使用示例:
        logger = get_logger()                     # mallcore.services.dept_service
        logger = get_logger("api")                # mallcore.api
        logger = get_logger("sqlalchemy.engine")  # 原样使用
    """
    if name is None:
        caller = inspect.currentframe().f_back
        name = caller.f_globals.get("__name__", ROOT_NAMESPACE) if caller else ROOT_NAMESPACE
    elif "." not in name and name != ROOT_NAMESPACE:
        name = f"{ROOT_NAMESPACE}.{name}"
    return logging.getLogger(name)


logger = logging.getLogger(ROOT_NAMESPACE)
