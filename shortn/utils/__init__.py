from shortn.utils.config import app_env, app_name, running_locally, load_config
from shortn.utils.helpers import get_short_link, require_environment
from shortn.utils.shortener import generate_shortcode
from shortn.utils.logging import initialize_logging
from shortn.utils.metrics import StoreMetrics
from shortn.utils.locks import ReadWriteLock


__all__ = [
    'generate_shortcode',
    'app_env',
    'app_name',
    'running_locally',
    'load_config',
    'get_short_link',
    'require_environment',
    'initialize_logging',
    'StoreMetrics',
    'ReadWriteLock',
]
