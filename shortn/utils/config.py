"""Utility functions for application configuration management.

The service reads its configuration from **AWS AppConfig**. Each environment
(`APP_ENV`) has a dedicated AppConfig *Environment* within the shared
AppConfig *Application* identified by `APP_NAME`. Configuration data is stored
as a JSON document under a configuration profile (typically `backend-config`).

The configuration JSON follows this structure:

    {
        "build": 7,
        "active_backend": "cassandra",
        "configs": {
            "shortn": {
                "cassandra": {
                    "hosts": ["cassandra-1", "cassandra-2"],
                    "port": 9042,
                    "keyspace": "shortn",
                    "corpus": "links",
                    "consistency": "ONE"
                },
                "store": {
                    "atomic_writes": true,
                    "reject_collisions": false
                }
            }
        }
    }

Functions:
    app_env() -> str
        Return the current application environment (`APP_ENV`), `'local'` by default.

    app_name() -> str | None
        Return the application name (`APP_NAME`), or None if not set.

    running_locally() -> bool
        True when the service runs on a developer machine.

    load_config(service_name: str) -> dict
        Load the service's section from AWS AppConfig (or from a local
        AppConfig agent when running locally).

Example:
    >>> from shortn.utils.config import load_config
    >>> config = load_config('shortn')
    >>> config['cassandra']['keyspace']
    'shortn'
"""

import os
import json
import functools
import logging
import urllib.parse
import urllib.request
from collections.abc import Callable

import boto3

from shortn.constants import ENV
from shortn.exceptions import BadConfigurationError
from shortn.types import AppConfig, AppConfigDataClient, ServiceConfiguration
from shortn.utils.helpers import require_environment


logger = logging.getLogger(__name__)


def app_env() -> str:
    """Return the current application environment by reading 'APP_ENV'

    Example:
        >>> os.environ['APP_ENV'] = 'dev'
        >>> app_env()
        'dev'
    """
    return os.environ.get(ENV.App.APP_ENV, 'local').lower()


def app_name() -> str | None:
    return os.environ.get(ENV.App.APP_NAME)


def running_locally() -> bool:
    return app_env() == 'local'


def _service_section(config: AppConfig, service_name: str) -> ServiceConfiguration:
    """Extract the active backend and store sections for one service

    Args:
        config (AppConfig):
            Full AppConfig document.
        service_name (str):
            Key of the service under `configs`.

    Returns:
        dict: `{<backend>: {...}, 'store': {...}}`

    Raises:
        BadConfigurationError:
            If the document lacks the active backend or the service section.
    """
    try:
        backend = config['active_backend']
        service_config = config['configs'][service_name]
        data = {backend: service_config[backend]}
    except (KeyError, TypeError) as e:
        raise BadConfigurationError(f"AppConfig document has no '{service_name}' backend section ({e}).") from e

    if not isinstance(data[backend], dict):
        raise BadConfigurationError(f"Backend section '{backend}' for '{service_name}' must be an object.")

    data['store'] = service_config.get('store', {})
    return data


def _load_local_appconfig(func: Callable[[str], dict]) -> Callable[[str], dict]:  # pragma: no cover
    """Decorator: load AppConfig from a local AppConfig Agent when running locally

    Behavior:
        - If the application is running locally and `APPCONFIG_AGENT_URL` is set
          to a safe local URL, fetch the app configuration JSON from the local AppConfig agent.
        - Else, call the wrapped function (which pulls from AWS AppConfig via boto3).

    Environment variables used:
        APPCONFIG_AGENT_URL     - Base URL of the local AppConfig Agent (e.g., http://localhost:2772).
        APPCONFIG_PROFILE_NAME  - Optional profile name (default: "backend-config").
    """

    def __validate_appconfig_url(url: str | None) -> str:
        if not url:
            return ''
        components = urllib.parse.urlparse(url)
        if components.scheme not in {'http', 'https'}:
            raise BadConfigurationError(f'Bad scheme {url}')
        if components.hostname not in {'localhost', '127.0.0.1', 'host.docker.internal'}:
            raise BadConfigurationError(f'Bad host {url}')
        if components.port not in {2772, None}:
            raise BadConfigurationError(f'Bad port {url}')
        return url

    @functools.wraps(func)
    def wrapper(service_name: str, *args, **kwargs) -> dict:
        agent_url = __validate_appconfig_url(os.getenv(ENV.AppConfig.AGENT_URL))
        if not running_locally() or not agent_url:
            return func(service_name, *args, **kwargs)

        profile_name = os.getenv(ENV.AppConfig.PROFILE_NAME, 'backend-config')
        url = f'{agent_url}/applications/{app_name()}/environments/{app_env()}/configurations/{profile_name}'

        logger.debug('Trying to load AppConfig from local agent.', extra={'agentUrl': url, 'serviceName': service_name})
        with urllib.request.urlopen(url, timeout=5) as r:  # noqa: S310
            config = json.load(r)

        data = _service_section(config, service_name)
        logger.debug('Loaded AppConfig from local agent.', extra={'serviceName': service_name, 'build': config.get('build')})
        return data

    return wrapper


@_load_local_appconfig
@require_environment(ENV.AppConfig.APP_ID, ENV.AppConfig.ENV_ID, ENV.AppConfig.PROFILE_ID)
def load_config(service_name: str) -> dict:
    """Load configuration for a given service from AWS AppConfig

    Environment variables required:
        APPCONFIG_APP_ID       - AppConfig Application ID
        APPCONFIG_ENV_ID       - AppConfig Environment ID
        APPCONFIG_PROFILE_ID   - AppConfig Configuration Profile ID

    Args:
        service_name (str):
            Name of the service section (e.g., "shortn").

    Returns:
        dict: The active backend section and the store section.

    Raises:
        MissingEnvironmentVariableError:
            If any of the AppConfig identifiers is not set.
        BadConfigurationError:
            If the document doesn't describe the requested service.

    Example:
        >>> app_config = load_config('shortn')
        >>> app_config['cassandra']['hosts']
        ['cassandra-1', 'cassandra-2']
    """
    logger.debug('Trying to load AppConfig from AWS AppConfig.', extra={'serviceName': service_name})

    appconfig: AppConfigDataClient = boto3.client('appconfigdata')

    session_token = appconfig.start_configuration_session(
        ApplicationIdentifier=os.environ[ENV.AppConfig.APP_ID],
        EnvironmentIdentifier=os.environ[ENV.AppConfig.ENV_ID],
        ConfigurationProfileIdentifier=os.environ[ENV.AppConfig.PROFILE_ID],
    )['InitialConfigurationToken']

    response = appconfig.get_latest_configuration(ConfigurationToken=session_token)
    content = response['Configuration'].read()
    config = json.loads(content.decode('utf-8'))

    data = _service_section(config, service_name)
    logger.debug('Loaded AppConfig from AWS AppConfig.', extra={'serviceName': service_name, 'build': config.get('build')})
    return data
