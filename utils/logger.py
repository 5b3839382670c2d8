import logging
import logging.config


def setup_logging(config):
    """Применить dictConfig из AppConfig и вернуть корневой логгер"""
    config.ensure_directories()
    logging.config.dictConfig(config.get_logging_config())
    logger = logging.getLogger()
    logger.debug(f"🔧 Логирование настроено: уровень {config.log_level.value}")
    return logger
