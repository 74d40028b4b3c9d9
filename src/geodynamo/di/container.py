from dependency_injector import containers, providers

from geodynamo.clients.dynamodb_client import create_boto3_client
from geodynamo.config.config import SETTINGS, GeoConfig
from geodynamo.geo_index import GeoIndex


class Container(containers.DeclarativeContainer):
    settings = providers.Object(SETTINGS)

    # Clients
    boto3_client = providers.Singleton(create_boto3_client, settings=settings)

    # Index
    geo_config = providers.Singleton(
        GeoConfig.from_settings, settings=settings, dynamodb_client=boto3_client
    )
    geo_index = providers.Singleton(GeoIndex, config=geo_config)
