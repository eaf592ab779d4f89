from core.db_connector import create_engine_from_request, reflect_schema  # noqa: F401
from core.metadata import table_query_metadata, virtual_table_metadata, table_fks  # noqa: F401
from core.binning import select_dimension_options, dimension_options_for_response  # noqa: F401
from core.dimensions import field_values_for_response, dimension_descriptor, resolve_target  # noqa: F401
from core.repository import MetadataRepository, repository, get_repository  # noqa: F401
from core.sync import sync_database, sync_table  # noqa: F401
