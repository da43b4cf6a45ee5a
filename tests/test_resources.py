import pytest

from gapibind.errors import DecodeError
from gapibind.fitness.resources import (AggregateRequest, Application, BucketByTime, DataPoint, DataSource,
                                        DataType, DataTypeField, Dataset, Session, Value)
from gapibind.mapsengine.resources import (Feature, GeoJsonGeometryCollection, GeoJsonLineString,
                                           GeoJsonPoint, GeoJsonPolygon, Geometry, Map, MapFolder,
                                           MapItem, MapKmlLink, MapLayer)

def test_unset_fields_not_sent():
    s = Session(id="s1", name="run")
    assert(s.to_base() == {"id": "s1", "name": "run"})

def test_int64_as_strings():
    s = Session(id="s1", startTimeMillis=1000, endTimeMillis="2000", activityType=8)
    assert(s.endTimeMillis == 2000)
    b = s.to_base()
    assert(b["startTimeMillis"] == "1000")
    assert(b["endTimeMillis"] == "2000")
    # plain integers stay numbers
    assert(b["activityType"] == 8)

def test_nested_decode():
    source = DataSource.from_base({
        "dataStreamId": "raw:com.google.step_count.delta:app",
        "type": "raw",
        "dataType": {"name": "com.google.step_count.delta",
                     "field": [{"name": "steps", "format": "integer"}]},
        "application": {"name": "app"},
        "unknownField": True,
    })
    assert(isinstance(source.dataType, DataType))
    assert(isinstance(source.dataType.field[0], DataTypeField))
    assert(source.dataType.field[0].format == "integer")
    assert(source.application.name == "app")
    assert(str(source) == "raw:com.google.step_count.delta:app:None")

def test_payload_round_trip():
    base = {
        "dataSourceId": "ds",
        "minStartTimeNs": "1000000",
        "maxEndTimeNs": "2000000",
        "point": [{"dataTypeName": "com.google.step_count.delta",
                   "startTimeNanos": "1000000", "endTimeNanos": "2000000",
                   "value": [{"intVal": 12}]}],
    }
    ds = Dataset.from_base(base)
    assert(len(ds) == 1)
    assert(isinstance(ds.point[0], DataPoint))
    assert(isinstance(ds.point[0].value[0], Value))
    assert(ds.point[0].startTimeNanos == 1000000)
    assert(ds.to_base() == base)
    assert(Dataset.from_base(ds.to_base()) == ds)

def test_decode_wrong_shape():
    with pytest.raises(DecodeError):
        Dataset.from_base(["not", "an", "object"])
    with pytest.raises(DecodeError):
        Dataset.from_base({"point": "not a list of points"})

def test_aggregate_single_bucket_strategy():
    req = AggregateRequest(startTimeMillis=0, endTimeMillis=86400000,
                           aggregateBy=[{"dataTypeName": "com.google.step_count.delta"}],
                           bucketByTime={"durationMillis": 3600000})
    assert(isinstance(req.bucketByTime, BucketByTime))
    assert(req.to_base()["bucketByTime"] == {"durationMillis": "3600000"})
    with pytest.raises(ValueError):
        AggregateRequest(bucketByTime={"durationMillis": 1}, bucketBySession={"minDurationMillis": 1})

def test_patch_keeps_only_changes():
    s = Session(id="s1", name="walk", description="evening")
    body = s.patch(name="morning walk", activityType=7)
    assert(isinstance(body, Session))
    assert(body.to_base() == {"name": "morning walk", "activityType": 7})
    assert(s.name == "morning walk")
    assert(s.description == "evening")
    # nested values are coerced on the way in
    src = DataSource(dataStreamId="ds")
    assert(isinstance(src.patch(application={"version": "2"}).application, Application))
    with pytest.raises(ValueError):
        s.patch(nope=1)

def test_geometry_variants():
    g = Geometry.from_base({"type": "Point", "coordinates": [151.2, -33.9]})
    assert(isinstance(g, GeoJsonPoint))
    assert(g.coordinates == [151.2, -33.9])
    assert(g.to_base() == {"type": "Point", "coordinates": [151.2, -33.9]})
    line = Geometry.from_base({"type": "LineString", "coordinates": [[0, 0], [1, 1]]})
    assert(isinstance(line, GeoJsonLineString))
    poly = Geometry.from_base({"type": "Polygon", "coordinates": [[[0, 0], [1, 0], [1, 1], [0, 0]]]})
    assert(isinstance(poly, GeoJsonPolygon))

def test_geometry_collection_nests_variants():
    base = {"type": "GeometryCollection",
            "geometries": [{"type": "Point", "coordinates": [1, 2]},
                           {"type": "LineString", "coordinates": [[1, 2], [3, 4]]}]}
    g = Geometry.from_base(base)
    assert(isinstance(g, GeoJsonGeometryCollection))
    assert(isinstance(g.geometries[0], GeoJsonPoint))
    assert(isinstance(g.geometries[1], GeoJsonLineString))
    assert(g.to_base() == base)

def test_unknown_discriminator():
    with pytest.raises(DecodeError):
        Geometry.from_base({"type": "Circle", "radius": 3})
    with pytest.raises(DecodeError):
        Geometry.from_base({"coordinates": [1, 2]})
    with pytest.raises(DecodeError):
        MapItem.from_base({"type": "Point"})
    # a specific variant only decodes its own type
    with pytest.raises(DecodeError):
        GeoJsonPoint.from_base({"type": "Polygon", "coordinates": []})

def test_feature_geometry():
    f = Feature.from_base({"type": "Feature",
                           "geometry": {"type": "Point", "coordinates": [1, 2]},
                           "properties": {"name": "here"}})
    assert(isinstance(f.geometry, GeoJsonPoint))
    assert(f.to_base()["geometry"] == {"type": "Point", "coordinates": [1, 2]})
    with pytest.raises(DecodeError):
        Feature.from_base({"geometry": {"type": "Blob"}})

def test_map_contents():
    m = Map.from_base({"id": "m1", "contents": [
        {"type": "folder", "name": "f", "contents": [
            {"type": "layer", "id": "l1"},
            {"type": "kmlLink", "kmlUrl": "https://example.com/a.kml"}]},
        {"type": "layer", "id": "l2"}]})
    folder = m.contents[0]
    assert(isinstance(folder, MapFolder))
    assert(isinstance(folder.contents[0], MapLayer))
    assert(isinstance(folder.contents[1], MapKmlLink))
    assert(isinstance(m.contents[1], MapLayer))
    assert(m.to_base()["contents"][0]["contents"][1] == {"type": "kmlLink", "kmlUrl": "https://example.com/a.kml"})
