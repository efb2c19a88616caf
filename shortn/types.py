from typing import Any, TypeAlias

from botocore.client import BaseClient


# Type aliases for Python dictionaries
AppConfig: TypeAlias = dict[str, Any]
ServiceConfiguration: TypeAlias = dict[str, Any]
CassandraConfiguration: TypeAlias = dict[str, Any]

# Type aliases for boto3 clients
AppConfigDataClient: TypeAlias = BaseClient
