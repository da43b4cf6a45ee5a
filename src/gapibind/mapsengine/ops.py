from functools import partial
from typing import List

from . import MapsEngineScopes, MaxFeaturesPerBatch
from .resources import (Asset, Feature, FeaturesBatchDeleteRequest, FeaturesBatchInsertRequest,
                        File, Icon, Layer, Map, Project, Raster, Table)
from ..access import gws
from ..media import MediaSource
from ..upload import ProgressCallback

gws.append_scopes(MapsEngineScopes)

# module level rather than a class holding the service, same effect
_get_service = partial(gws.get_service, "mapsengine", "v1")

def list_assets(projectId: str|None = None,
                tags: List[str]|None = None,
                type: str|None = None,
                search: str|None = None) -> List[Asset]:
    """
    Wrapper for assets.list
    https://developers.google.com/maps-engine/documentation/reference/v1/assets/list
    Every asset matching the filters, across all pages.  Assets must carry
    all of the tags to match.
    """
    call = _get_service().assets.list(projectId=projectId, tags=tags, type=type, search=search)
    assets = []
    for page in call.pages():
        assets.extend(page.assets or [])
    return assets

def list_projects() -> List[Project]:
    """
    Wrapper for projects.list
    https://developers.google.com/maps-engine/documentation/reference/v1/projects/list
    """
    response = _get_service().projects.list().execute()
    return response.projects or []

def create_icon(projectId: str, image: MediaSource, name: str,
                description: str|None = None,
                media_type: str|None = None) -> Icon:
    """
    Wrapper for projects.icons.create
    https://developers.google.com/maps-engine/documentation/reference/v1/projects/icons/create
    Metadata and image go up together as one multipart request.
    """
    body = Icon(name=name, description=description)
    return _get_service().projects.icons.create(projectId, body).media(image, media_type).execute()

def publish_layer(layerId: str, force: bool = False) -> str:
    """
    Wrapper for layers.publish
    https://developers.google.com/maps-engine/documentation/reference/v1/layers/publish
    Returns the id of the published layer.
    """
    response = _get_service().layers.publish(layerId, force=force or None).execute()
    return response.id

def create_map(map: Map) -> Map:
    """
    Wrapper for maps.create
    https://developers.google.com/maps-engine/documentation/reference/v1/maps/create
    """
    return _get_service().maps.create(map).execute()

def create_layer(layer: Layer, process: bool = False) -> Layer:
    """
    Wrapper for layers.create
    https://developers.google.com/maps-engine/documentation/reference/v1/layers/create
    process starts processing the layer straight away.
    """
    return _get_service().layers.create(layer, process=process or None).execute()

def upload_table(table: Table,
                 files: dict[str, MediaSource],
                 chunk_size: int|None = None,
                 progress: ProgressCallback|None = None) -> Table:
    """
    Wrappers for tables.upload followed by tables.files.insert for each file.
    https://developers.google.com/maps-engine/documentation/reference/v1/tables/upload
    files maps the file names declared on the table to their contents.  The
    files are sent with the resumable protocol, one after the other.
    """
    service = _get_service()
    table.files = [File(filename=name) for name in files]
    created = service.tables.upload(table).execute()
    for name, source in files.items():
        upload_file(service.tables.files.insert, created.id, name, source, chunk_size, progress)
    return created

def upload_raster(raster: Raster,
                  files: dict[str, MediaSource],
                  chunk_size: int|None = None,
                  progress: ProgressCallback|None = None) -> Raster:
    """
    Wrappers for rasters.upload followed by rasters.files.insert for each file.
    https://developers.google.com/maps-engine/documentation/reference/v1/rasters/upload
    """
    service = _get_service()
    raster.files = [File(filename=name) for name in files]
    created = service.rasters.upload(raster).execute()
    for name, source in files.items():
        upload_file(service.rasters.files.insert, created.id, name, source, chunk_size, progress)
    return created

def upload_file(method, assetId: str, filename: str, source: MediaSource,
                chunk_size: int|None = None,
                progress: ProgressCallback|None = None) -> None:
    """
    One files.insert, resumable.  Paths and MediaUploads carry their own
    type, anything else is sniffed.
    """
    call = method(assetId, filename=filename)
    call.resumable_media(source, chunk_size=chunk_size).progress_updater(progress).execute()

def list_features(tableId: str,
                  where: str|None = None,
                  select: List[str]|None = None,
                  intersects: str|None = None) -> List[Feature]:
    """
    Wrapper for tables.features.list
    https://developers.google.com/maps-engine/documentation/reference/v1/tables/features/list
    where is a SQL-like predicate over the table columns, intersects a WKT geometry.
    """
    call = _get_service().tables.features.list(tableId, where=where, select=select,
                                               intersects=intersects)
    features = []
    for page in call.pages():
        features.extend(page.features or [])
    return features

def batch_insert_features(tableId: str, features: List[Feature],
                          normalizeGeometries: bool|None = None) -> int:
    """
    Wrapper for tables.features.batchInsert
    https://developers.google.com/maps-engine/documentation/reference/v1/tables/features/batchInsert
    Split into as many requests as the per request feature limit needs.
    Returns the number of requests made.
    """
    method = _get_service().tables.features.batchInsert
    batches = 0
    for i in range(0, len(features), MaxFeaturesPerBatch):
        body = FeaturesBatchInsertRequest(features=features[i:i + MaxFeaturesPerBatch],
                                          normalizeGeometries=normalizeGeometries)
        method(tableId, body).execute()
        batches += 1
    return batches

def batch_delete_features(tableId: str,
                          primaryKeys: List[str]|None = None,
                          gx_ids: List[str]|None = None) -> int:
    """
    Wrapper for tables.features.batchDelete
    https://developers.google.com/maps-engine/documentation/reference/v1/tables/features/batchDelete
    """
    if bool(primaryKeys) == bool(gx_ids):
        raise ValueError("delete by either primaryKeys or gx_ids")
    keys = primaryKeys or gx_ids
    method = _get_service().tables.features.batchDelete
    batches = 0
    for i in range(0, len(keys), MaxFeaturesPerBatch):
        chunk = keys[i:i + MaxFeaturesPerBatch]
        body = (FeaturesBatchDeleteRequest(primaryKeys=chunk) if primaryKeys
                else FeaturesBatchDeleteRequest(gx_ids=chunk))
        method(tableId, body).execute()
        batches += 1
    return batches
