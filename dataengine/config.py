import os
from dotenv import load_dotenv

load_dotenv()


def env_flag(name, default='false'):
    """Read a boolean environment variable (1/true/yes/on)"""
    return os.getenv(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    # Debug / logging
    DEBUG_MODE = env_flag('DATA_ENGINE_DEBUG')
    LOG_LEVEL = os.getenv('DATA_ENGINE_LOG_LEVEL', 'DEBUG' if DEBUG_MODE else 'INFO')
    LOG_DIR = os.getenv('DATA_ENGINE_LOG_DIR', os.path.join(os.getcwd(), 'data-engine-logs'))

    # Formatting
    LOCALE = os.getenv('DATA_ENGINE_LOCALE', 'en_US')

    # Conditional reduction safety limit
    MAX_CONDITIONAL_ITERATIONS = int(os.getenv('DATA_ENGINE_MAX_CONDITIONAL_ITERATIONS', 1000))

    # Tag source keywords
    SOURCE_CUSTOM = os.getenv('DATA_ENGINE_SOURCE_CUSTOM', 'custom')
    SOURCE_NATIVE = os.getenv('DATA_ENGINE_SOURCE_NATIVE', 'native')
    SOURCE_ROW = os.getenv('DATA_ENGINE_SOURCE_ROW', 'row')

    # Widget output cache
    ENABLE_CACHING = env_flag('DATA_ENGINE_ENABLE_CACHING')
    CACHE_EXPIRATION = int(os.getenv('DATA_ENGINE_CACHE_EXPIRATION', 3600))
    CACHE_REDIS_URL = os.getenv('DATA_ENGINE_CACHE_REDIS_URL', '')

    @classmethod
    def source_keywords(cls):
        return (cls.SOURCE_CUSTOM, cls.SOURCE_NATIVE, cls.SOURCE_ROW)
