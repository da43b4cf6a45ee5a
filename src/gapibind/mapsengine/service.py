"""
Maps Engine v1 method table.
https://developers.google.com/maps-engine/documentation/reference/v1/
"""
from ..call import ApiService, MediaUploadSpec, MethodSpec, QueryParam
from .resources import (Asset, AssetsListResponse, Feature, FeaturesBatchDeleteRequest,
                        FeaturesBatchInsertRequest, FeaturesListResponse, Icon,
                        IconsListResponse, Layer, LayersListResponse, Map, MapsListResponse,
                        ProjectsListResponse, PublishResponse, Raster, Table, TablesListResponse)

_UPLOAD_PREFIX = "/upload/mapsengine/v1/"

# filters shared by every asset listing
_LIST_QUERY = {
    "bbox": QueryParam(),
    "createdAfter": QueryParam(),
    "createdBefore": QueryParam(),
    "creatorEmail": QueryParam(),
    "maxResults": QueryParam(),
    "modifiedAfter": QueryParam(),
    "modifiedBefore": QueryParam(),
    "pageToken": QueryParam(),
    "projectId": QueryParam(),
    "role": QueryParam(),
    "search": QueryParam(),
    "tags": QueryParam(comma_joined=True),
}

_FILE_INSERT_QUERY = {"filename": QueryParam(required=True)}

METHODS = (
    MethodSpec("mapsengine.assets.get", "GET", "assets/{id}",
               parameter_order=("id",), response=Asset),
    MethodSpec("mapsengine.assets.list", "GET", "assets",
               query=dict(_LIST_QUERY, type=QueryParam()),
               response=AssetsListResponse),

    MethodSpec("mapsengine.layers.create", "POST", "layers",
               query={"process": QueryParam()},
               request=Layer, response=Layer),
    MethodSpec("mapsengine.layers.delete", "DELETE", "layers/{id}",
               parameter_order=("id",)),
    MethodSpec("mapsengine.layers.get", "GET", "layers/{id}",
               parameter_order=("id",),
               query={"version": QueryParam()},
               response=Layer),
    MethodSpec("mapsengine.layers.list", "GET", "layers",
               query=dict(_LIST_QUERY, processingStatus=QueryParam()),
               response=LayersListResponse),
    MethodSpec("mapsengine.layers.publish", "POST", "layers/{id}/publish",
               parameter_order=("id",),
               query={"force": QueryParam()},
               response=PublishResponse),

    MethodSpec("mapsengine.maps.create", "POST", "maps",
               request=Map, response=Map),
    MethodSpec("mapsengine.maps.delete", "DELETE", "maps/{id}",
               parameter_order=("id",)),
    MethodSpec("mapsengine.maps.get", "GET", "maps/{id}",
               parameter_order=("id",),
               query={"version": QueryParam()},
               response=Map),
    MethodSpec("mapsengine.maps.list", "GET", "maps",
               query=dict(_LIST_QUERY, processingStatus=QueryParam()),
               response=MapsListResponse),

    MethodSpec("mapsengine.projects.list", "GET", "projects",
               response=ProjectsListResponse),
    MethodSpec("mapsengine.projects.icons.create", "POST", "projects/{projectId}/icons",
               parameter_order=("projectId",),
               request=Icon, response=Icon,
               media_upload=MediaUploadSpec(_UPLOAD_PREFIX + "projects/{projectId}/icons",
                                            protocols=("simple",),
                                            max_size=100 * 1024)),
    MethodSpec("mapsengine.projects.icons.get", "GET", "projects/{projectId}/icons/{id}",
               parameter_order=("projectId", "id"),
               response=Icon),
    MethodSpec("mapsengine.projects.icons.list", "GET", "projects/{projectId}/icons",
               parameter_order=("projectId",),
               query={"maxResults": QueryParam(), "pageToken": QueryParam()},
               response=IconsListResponse),

    MethodSpec("mapsengine.rasters.delete", "DELETE", "rasters/{id}",
               parameter_order=("id",)),
    MethodSpec("mapsengine.rasters.get", "GET", "rasters/{id}",
               parameter_order=("id",),
               response=Raster),
    MethodSpec("mapsengine.rasters.upload", "POST", "rasters/upload",
               request=Raster, response=Raster),
    MethodSpec("mapsengine.rasters.files.insert", "POST", "rasters/{id}/files",
               parameter_order=("id",),
               query=_FILE_INSERT_QUERY,
               media_upload=MediaUploadSpec(_UPLOAD_PREFIX + "rasters/{id}/files",
                                            max_size=10 * 1024 ** 3)),

    MethodSpec("mapsengine.tables.create", "POST", "tables",
               request=Table, response=Table),
    MethodSpec("mapsengine.tables.delete", "DELETE", "tables/{id}",
               parameter_order=("id",)),
    MethodSpec("mapsengine.tables.get", "GET", "tables/{id}",
               parameter_order=("id",),
               query={"version": QueryParam()},
               response=Table),
    MethodSpec("mapsengine.tables.list", "GET", "tables",
               query=dict(_LIST_QUERY, processingStatus=QueryParam()),
               response=TablesListResponse),
    MethodSpec("mapsengine.tables.upload", "POST", "tables/upload",
               request=Table, response=Table),
    MethodSpec("mapsengine.tables.files.insert", "POST", "tables/{id}/files",
               parameter_order=("id",),
               query=_FILE_INSERT_QUERY,
               media_upload=MediaUploadSpec(_UPLOAD_PREFIX + "tables/{id}/files",
                                            max_size=1024 ** 3)),

    MethodSpec("mapsengine.tables.features.batchDelete", "POST", "tables/{id}/features/batchDelete",
               parameter_order=("id",),
               request=FeaturesBatchDeleteRequest),
    MethodSpec("mapsengine.tables.features.batchInsert", "POST", "tables/{id}/features/batchInsert",
               parameter_order=("id",),
               request=FeaturesBatchInsertRequest),
    MethodSpec("mapsengine.tables.features.get", "GET", "tables/{tableId}/features/{id}",
               parameter_order=("tableId", "id"),
               query={"select": QueryParam(comma_joined=True), "version": QueryParam()},
               response=Feature),
    MethodSpec("mapsengine.tables.features.list", "GET", "tables/{id}/features",
               parameter_order=("id",),
               query={"include": QueryParam(comma_joined=True),
                      "intersects": QueryParam(),
                      "limit": QueryParam(),
                      "maxResults": QueryParam(),
                      "orderBy": QueryParam(),
                      "pageToken": QueryParam(),
                      "select": QueryParam(comma_joined=True),
                      "version": QueryParam(),
                      "where": QueryParam()},
               response=FeaturesListResponse),
)

class MapsEngineService(ApiService):
    """
    Maps Engine v1.  Raster and table source files go up with
    rasters.files.insert / tables.files.insert, resumable for anything big:

        service.tables.files.insert(table_id, filename="roads.shp")
               .resumable_media("roads.shp").execute()
    """
    api_name = "mapsengine"
    api_version = "v1"
    service_path = "mapsengine/v1/"
    methods = METHODS
