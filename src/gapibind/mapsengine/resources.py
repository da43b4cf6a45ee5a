"""
Maps Engine v1 resources.
https://developers.google.com/maps-engine/documentation/reference/v1/
Geometries and map contents are variant payloads, their 'type' member
decides which class a JSON object decodes into.
"""
from dataclasses import dataclass, field
from typing import List

from ..resources import ApiResourceBase, VariantBase

# ---- geometry (GeoJSON) ----

@dataclass
class Geometry(VariantBase):
    """
    A GeoJSON geometry.  Decoding Geometry.from_base() picks the subclass
    named by 'type', positions are [longitude, latitude] or with altitude.
    """
    pass

@dataclass
class GeoJsonPoint(Geometry):
    variant_name = "Point"
    coordinates: List[float]|None = field(default=None)

@dataclass
class GeoJsonLineString(Geometry):
    variant_name = "LineString"
    coordinates: List[List[float]]|None = field(default=None)

@dataclass
class GeoJsonPolygon(Geometry):
    """The first ring is the outer boundary, any others are holes."""
    variant_name = "Polygon"
    coordinates: List[List[List[float]]]|None = field(default=None)

@dataclass
class GeoJsonMultiPoint(Geometry):
    variant_name = "MultiPoint"
    coordinates: List[List[float]]|None = field(default=None)

@dataclass
class GeoJsonMultiLineString(Geometry):
    variant_name = "MultiLineString"
    coordinates: List[List[List[float]]]|None = field(default=None)

@dataclass
class GeoJsonMultiPolygon(Geometry):
    variant_name = "MultiPolygon"
    coordinates: List[List[List[List[float]]]]|None = field(default=None)

@dataclass
class GeoJsonGeometryCollection(Geometry):
    variant_name = "GeometryCollection"
    geometries: List[Geometry]|None = field(default=None)

    _nested = {'geometries': Geometry}

# ---- map contents ----

@dataclass
class MapItem(VariantBase):
    """An entry of a map's contents: a folder, a layer or a KML link."""
    pass

@dataclass
class MapFolder(MapItem):
    variant_name = "folder"
    contents: List[MapItem]|None = field(default=None)
    defaultViewport: List[float]|None = field(default=None)
    expandable: bool|None = field(default=None)
    key: str|None = field(default=None)
    name: str|None = field(default=None)
    visibility: str|None = field(default=None)

    _nested = {'contents': MapItem}

@dataclass
class MapLayer(MapItem):
    variant_name = "layer"
    defaultViewport: List[float]|None = field(default=None)
    id: str|None = field(default=None)
    key: str|None = field(default=None)
    name: str|None = field(default=None)
    visibility: str|None = field(default=None)

@dataclass
class MapKmlLink(MapItem):
    variant_name = "kmlLink"
    defaultViewport: List[float]|None = field(default=None)
    kmlUrl: str|None = field(default=None)
    name: str|None = field(default=None)
    visibility: str|None = field(default=None)

# ---- assets ----

@dataclass
class Asset(ApiResourceBase):
    """
    https://developers.google.com/maps-engine/documentation/reference/v1/assets
    Common view of any asset (layer, map, raster, table, ...).  type says which.
    """
    bbox: List[float]|None = field(default=None)
    creationTime: str|None = field(default=None)
    creatorEmail: str|None = field(default=None)
    description: str|None = field(default=None)
    etag: str|None = field(default=None)
    id: str|None = field(default=None)
    lastModifiedTime: str|None = field(default=None)
    lastModifierEmail: str|None = field(default=None)
    name: str|None = field(default=None)
    projectId: str|None = field(default=None)
    resource: str|None = field(default=None)
    tags: List[str]|None = field(default=None)
    type: str|None = field(default=None)
    writersCanEditPermissions: bool|None = field(default=None)

    def __bool__(self) -> bool:
        return bool(self.id)

    def __str__(self) -> str:
        if self:
            return f"{self.type}:{self.id}:{self.name}"
        return "<empty>"

@dataclass
class AssetsListResponse(ApiResourceBase):
    assets: List[Asset]|None = field(default=None)
    nextPageToken: str|None = field(default=None)

    _nested = {'assets': Asset}

@dataclass
class File(ApiResourceBase):
    """An uploaded source file of a raster or table."""
    filename: str|None = field(default=None)
    size: int|None = field(default=None)
    uploadStatus: str|None = field(default=None)

    _int64 = ('size',)

@dataclass
class Datasource(ApiResourceBase):
    id: str|None = field(default=None)

@dataclass
class Layer(ApiResourceBase):
    """
    https://developers.google.com/maps-engine/documentation/reference/v1/layers
    datasourceType is image or table, style is left as the raw dict.
    """
    bbox: List[float]|None = field(default=None)
    creationTime: str|None = field(default=None)
    creatorEmail: str|None = field(default=None)
    datasourceType: str|None = field(default=None)
    datasources: List[Datasource]|None = field(default=None)
    description: str|None = field(default=None)
    draftAccessList: str|None = field(default=None)
    etag: str|None = field(default=None)
    id: str|None = field(default=None)
    lastModifiedTime: str|None = field(default=None)
    lastModifierEmail: str|None = field(default=None)
    layerType: str|None = field(default=None)
    name: str|None = field(default=None)
    processingStatus: str|None = field(default=None)
    projectId: str|None = field(default=None)
    publishedAccessList: str|None = field(default=None)
    publishingStatus: str|None = field(default=None)
    style: dict|None = field(default=None)
    tags: List[str]|None = field(default=None)
    writersCanEditPermissions: bool|None = field(default=None)

    _nested = {'datasources': Datasource}

    def __bool__(self) -> bool:
        return bool(self.id)

@dataclass
class LayersListResponse(ApiResourceBase):
    layers: List[Layer]|None = field(default=None)
    nextPageToken: str|None = field(default=None)

    _nested = {'layers': Layer}

@dataclass
class PublishResponse(ApiResourceBase):
    id: str|None = field(default=None)

@dataclass
class Map(ApiResourceBase):
    """
    https://developers.google.com/maps-engine/documentation/reference/v1/maps
    """
    bbox: List[float]|None = field(default=None)
    contents: List[MapItem]|None = field(default=None)
    creationTime: str|None = field(default=None)
    creatorEmail: str|None = field(default=None)
    defaultViewport: List[float]|None = field(default=None)
    description: str|None = field(default=None)
    draftAccessList: str|None = field(default=None)
    etag: str|None = field(default=None)
    id: str|None = field(default=None)
    lastModifiedTime: str|None = field(default=None)
    lastModifierEmail: str|None = field(default=None)
    name: str|None = field(default=None)
    processingStatus: str|None = field(default=None)
    projectId: str|None = field(default=None)
    publishedAccessList: str|None = field(default=None)
    publishingStatus: str|None = field(default=None)
    tags: List[str]|None = field(default=None)
    versions: List[str]|None = field(default=None)
    writersCanEditPermissions: bool|None = field(default=None)

    _nested = {'contents': MapItem}

    def __bool__(self) -> bool:
        return bool(self.id)

@dataclass
class MapsListResponse(ApiResourceBase):
    maps: List[Map]|None = field(default=None)
    nextPageToken: str|None = field(default=None)

    _nested = {'maps': Map}

@dataclass
class Project(ApiResourceBase):
    id: str|None = field(default=None)
    name: str|None = field(default=None)

@dataclass
class ProjectsListResponse(ApiResourceBase):
    projects: List[Project]|None = field(default=None)

    _nested = {'projects': Project}

@dataclass
class Icon(ApiResourceBase):
    """A project icon for point styles, the image is uploaded with icons.create."""
    description: str|None = field(default=None)
    id: str|None = field(default=None)
    name: str|None = field(default=None)

@dataclass
class IconsListResponse(ApiResourceBase):
    icons: List[Icon]|None = field(default=None)
    nextPageToken: str|None = field(default=None)

    _nested = {'icons': Icon}

@dataclass
class Raster(ApiResourceBase):
    """
    https://developers.google.com/maps-engine/documentation/reference/v1/rasters
    rasters.upload creates the raster with its list of files, the files
    themselves go up with rasters.files.insert.
    """
    acquisitionTime: dict|None = field(default=None)
    attribution: str|None = field(default=None)
    bbox: List[float]|None = field(default=None)
    creationTime: str|None = field(default=None)
    creatorEmail: str|None = field(default=None)
    description: str|None = field(default=None)
    draftAccessList: str|None = field(default=None)
    etag: str|None = field(default=None)
    files: List[File]|None = field(default=None)
    id: str|None = field(default=None)
    lastModifiedTime: str|None = field(default=None)
    lastModifierEmail: str|None = field(default=None)
    maskType: str|None = field(default=None)
    name: str|None = field(default=None)
    processingStatus: str|None = field(default=None)
    projectId: str|None = field(default=None)
    rasterType: str|None = field(default=None)
    tags: List[str]|None = field(default=None)
    writersCanEditPermissions: bool|None = field(default=None)

    _nested = {'files': File}

    def __bool__(self) -> bool:
        return bool(self.id)

@dataclass
class TableColumn(ApiResourceBase):
    """type is one of integer, double, string, datetime, points, lineStrings, polygons, mixedGeometry"""
    name: str|None = field(default=None)
    type: str|None = field(default=None)

@dataclass
class Schema(ApiResourceBase):
    columns: List[TableColumn]|None = field(default=None)
    primaryGeometry: str|None = field(default=None)
    primaryKey: str|None = field(default=None)

    _nested = {'columns': TableColumn}

@dataclass
class Table(ApiResourceBase):
    """
    https://developers.google.com/maps-engine/documentation/reference/v1/tables
    tables.create takes a schema, tables.upload a list of files instead.
    """
    bbox: List[float]|None = field(default=None)
    creationTime: str|None = field(default=None)
    creatorEmail: str|None = field(default=None)
    description: str|None = field(default=None)
    draftAccessList: str|None = field(default=None)
    etag: str|None = field(default=None)
    files: List[File]|None = field(default=None)
    id: str|None = field(default=None)
    lastModifiedTime: str|None = field(default=None)
    lastModifierEmail: str|None = field(default=None)
    name: str|None = field(default=None)
    processingStatus: str|None = field(default=None)
    projectId: str|None = field(default=None)
    publishedAccessList: str|None = field(default=None)
    schema: Schema|dict|None = field(default=None)
    sourceEncoding: str|None = field(default=None)
    tags: List[str]|None = field(default=None)
    writersCanEditPermissions: bool|None = field(default=None)

    _nested = {'files': File, 'schema': Schema}

    def __bool__(self) -> bool:
        return bool(self.id)

@dataclass
class TablesListResponse(ApiResourceBase):
    nextPageToken: str|None = field(default=None)
    tables: List[Table]|None = field(default=None)

    _nested = {'tables': Table}

@dataclass
class Feature(ApiResourceBase):
    """
    https://developers.google.com/maps-engine/documentation/reference/v1/tables/features
    A GeoJSON feature, properties holds the non geometry columns.
    """
    geometry: Geometry|dict|None = field(default=None)
    properties: dict|None = field(default=None)
    type: str|None = field(default="Feature")

    _nested = {'geometry': Geometry}

@dataclass
class FeaturesListResponse(ApiResourceBase):
    allowedQueriesPerSecond: float|None = field(default=None)
    features: List[Feature]|None = field(default=None)
    nextPageToken: str|None = field(default=None)
    schema: Schema|dict|None = field(default=None)
    type: str|None = field(default=None)

    _nested = {'features': Feature, 'schema': Schema}

@dataclass
class FeaturesBatchInsertRequest(ApiResourceBase):
    features: List[Feature]|None = field(default=None)
    normalizeGeometries: bool|None = field(default=None)

    _nested = {'features': Feature}

@dataclass
class FeaturesBatchDeleteRequest(ApiResourceBase):
    """Delete by gx_id or by primary key, not both."""
    gx_ids: List[str]|None = field(default=None)
    primaryKeys: List[str]|None = field(default=None)
