from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Converter settings.

    Required for the chado source only:
      - DATABASE_URL

    Optional:
      - DB_SCHEMA: used for prefixing table names in raw SQL: "{schema}.{table}"
      - ORGANISMS / STRAINS: space-separated taxon IDs and strain names to process
      - PROCESSORS: space-separated chado processor names, run in order
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: Optional[str] = None
    db_schema: Optional[str] = None

    # DataSource / DataSet defaults for the LIS datastore
    data_source_name: str = Field(
        default="Legume Information System",
        validation_alias="DATA_SOURCE_NAME",
    )
    data_source_url: str = Field(
        default="https://legumeinfo.org/",
        validation_alias="DATA_SOURCE_URL",
    )
    data_set_title: Optional[str] = Field(
        default=None,
        validation_alias="DATA_SET_TITLE",
    )
    data_set_url: Optional[str] = Field(
        default=None,
        validation_alias="DATA_SET_URL",
    )

    # chado source configuration
    organisms: str = Field(
        default="",
        validation_alias="ORGANISMS",
        description="Space-separated taxon IDs of the organisms to process",
    )
    strains: str = Field(default="", validation_alias="STRAINS")
    homologue_organisms: str = Field(default="", validation_alias="HOMOLOGUE_ORGANISMS")
    homologue_strains: str = Field(default="", validation_alias="HOMOLOGUE_STRAINS")
    processors: str = Field(
        default="",
        validation_alias="PROCESSORS",
        description="Space-separated processor names, run in the given order",
    )
    reactome_file: Optional[str] = Field(default=None, validation_alias="REACTOME_FILE")
    phytozome_version: str = Field(default="", validation_alias="PHYTOZOME_VERSION")

    # Optional properties file with taxon.<id>.genus / taxon.<id>.species entries
    organism_config: Optional[str] = Field(default=None, validation_alias="ORGANISM_CONFIG")

    # Default variety used when chado does not supply one
    default_variety: str = Field(default="Unknown", validation_alias="DEFAULT_VARIETY")

    # Output
    items_file: str = Field(default="items.xml", validation_alias="ITEMS_FILE")

    # NCBI Entrez
    entrez_email: str = Field(
        default="legfed-admin@legumeinfo.org",
        validation_alias="ENTREZ_EMAIL",
    )

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")


settings = Settings()
