import importlib
import json

import pytest

from gapibind import media
from gapibind.access import gws
from gapibind.errors import CompositionError, DecodeError, ProtocolError
from gapibind.mapsengine import MaxFeaturesPerBatch, ops
from gapibind.mapsengine.resources import (Feature, GeoJsonPoint, GeoJsonPolygon, Icon, Layer, Map, MapLayer,
                                           Raster, Table)
from gapibind.mapsengine.service import METHODS
from gapibind.media import as_media_upload

from conftest import FakeSession, UploadServer, make_response

BASE = "https://www.googleapis.com/mapsengine/v1/"
UPLOAD = "https://www.googleapis.com/upload/mapsengine/v1/"
PNG = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR" + b"\x00" * 32

@pytest.fixture
def service(mapsengine, monkeypatch):
    monkeypatch.setattr(ops, "_get_service", lambda: mapsengine)
    return mapsengine

def test_method_table_names():
    names = {m.id for m in METHODS}
    for op in ["assets.get", "assets.list", "layers.create", "layers.delete", "layers.get", "layers.list",
               "layers.publish", "maps.create", "maps.delete", "maps.get", "maps.list", "projects.list",
               "projects.icons.create", "projects.icons.get", "projects.icons.list", "rasters.delete",
               "rasters.get", "rasters.upload", "rasters.files.insert", "tables.create", "tables.delete",
               "tables.get", "tables.list", "tables.upload", "tables.files.insert",
               "tables.features.batchDelete", "tables.features.batchInsert", "tables.features.get",
               "tables.features.list"]:
        assert(f"mapsengine.{op}" in names)

def test_comma_joined_tags(mapsengine):
    r = mapsengine.assets.list(tags=["roads", "2014"], projectId="p1").build_request()
    assert(r.url == BASE + "assets?alt=json&projectId=p1&tags=roads%2C2014")

def test_nested_path(mapsengine):
    r = mapsengine.tables.features.get("t1", "f1", select=["name", "geometry"]).build_request()
    assert(r.url == BASE + "tables/t1/features/f1?alt=json&select=name%2Cgeometry")
    r = mapsengine.projects.icons.list("p1", maxResults=10).build_request()
    assert(r.url == BASE + "projects/p1/icons?alt=json&maxResults=10")

def test_required_query_parameter(mapsengine, session):
    call = mapsengine.tables.files.insert("t1").media(b"a,b\n")
    with pytest.raises(CompositionError):
        call.execute()
    assert(not session.requests)

def test_simple_media_upload(mapsengine, session):
    session.queue(204)
    result = mapsengine.tables.files.insert("t1", filename="data.csv").media(b"a,b\n1,2\n", "text/csv").execute()
    assert(result is None)
    sent = session.requests[0]
    assert(sent.method == "POST")
    assert(sent.url == UPLOAD + "tables/t1/files?alt=json&filename=data.csv&uploadType=media")
    assert(sent.headers["Content-Type"] == "text/csv")
    assert(sent.data == b"a,b\n1,2\n")

def test_multipart_icon_upload(service, session):
    session.queue(200, {"id": "icon1", "name": "pin"})
    icon = ops.create_icon("p1", PNG, "pin")
    assert(isinstance(icon, Icon))
    assert(icon.id == "icon1")
    sent = session.requests[0]
    assert(sent.url == UPLOAD + "projects/p1/icons?alt=json&uploadType=multipart")
    assert(sent.headers["Content-Type"].startswith("multipart/related; boundary="))
    assert(b'{"name": "pin"}' in sent.data)
    assert(b"Content-Type: image/png\r\n\r\n" + PNG in sent.data)

def test_icon_limits(mapsengine, session):
    with pytest.raises(CompositionError):
        mapsengine.projects.icons.create("p1", Icon(name="big")).resumable_media(PNG)
    with pytest.raises(CompositionError):
        mapsengine.projects.icons.create("p1", Icon(name="big")).media(PNG + b"\x00" * 200 * 1024).execute()
    assert(not session.requests)

def test_resumable_file_insert(mapsengine):
    server = UploadServer()
    client = FakeSession(server)
    service = type(mapsengine)(client)
    data = b"x" * (600 * 1024)
    progress = []
    result = (service.rasters.files.insert("r1", filename="tile.tif")
              .resumable_media(data, "image/tiff", chunk_size=100 * 1024)
              .progress_updater(progress.append)
              .execute())
    # files.insert has no response resource
    assert(result is None)
    init = server.initiations[0]
    assert(init.url == UPLOAD + "rasters/r1/files?alt=json&filename=tile.tif&uploadType=resumable")
    assert(init.data is None)
    assert(init.headers["X-Upload-Content-Type"] == "image/tiff")
    # 100KB is rounded up to 256KB
    assert([c.headers["Content-Range"] for c in server.chunks] ==
           ["bytes 0-262143/614400", "bytes 262144-524287/614400", "bytes 524288-614399/614400"])
    assert(progress == [262144, 524288, 614400])
    assert(bytes(server.received) == data)

def test_upload_table(service, session):
    server = UploadServer()
    def handler(req):
        if req.url.startswith(BASE + "tables/upload"):
            return make_response(200, {"id": "t9", "name": "roads", "files": [{"filename": "roads.csv"}]})
        return server(req)
    session.handler = handler
    created = ops.upload_table(Table(name="roads", projectId="p1"), {"roads.csv": b"id,name\n1,A1\n"})
    assert(created.id == "t9")
    body = json.loads(session.requests[0].data)
    assert(body == {"name": "roads", "projectId": "p1", "files": [{"filename": "roads.csv"}]})
    assert(server.initiations[0].url == UPLOAD + "tables/t9/files?alt=json&filename=roads.csv&uploadType=resumable")
    assert(server.initiations[0].headers["X-Upload-Content-Type"] == "text/plain; charset=utf-8")
    assert(bytes(server.received) == b"id,name\n1,A1\n")

def test_upload_raster(service, session):
    server = UploadServer()
    def handler(req):
        if req.url.startswith(BASE + "rasters/upload"):
            return make_response(200, {"id": "r9", "files": [{"filename": "a.tif", "size": "4"}]})
        return server(req)
    session.handler = handler
    created = ops.upload_raster(Raster(name="imagery", projectId="p1"), {"a.tif": b"\x00\x01\x02\x03"})
    assert(isinstance(created, Raster))
    assert(created.files[0].size == 4)
    assert(server.initiations[0].url.startswith(UPLOAD + "rasters/r9/files?"))

def test_list_assets_paged(service, session):
    session.queue(200, {"assets": [{"id": "a1", "type": "table"}], "nextPageToken": "n"})
    session.queue(200, {"assets": [{"id": "a2", "type": "layer"}]})
    assets = ops.list_assets(projectId="p1", tags=["x", "y"])
    assert([str(a) for a in assets] == ["table:a1:None", "layer:a2:None"])
    assert(session.requests[1].url == BASE + "assets?alt=json&pageToken=n&projectId=p1&tags=x%2Cy")

def test_list_projects(service, session):
    session.queue(200, {"projects": [{"id": "p1", "name": "Project"}]})
    assert(ops.list_projects()[0].name == "Project")

def test_publish_and_create(service, session):
    session.queue(200, {"id": "l1"})
    assert(ops.publish_layer("l1", force=True) == "l1")
    assert(session.requests[0].url == BASE + "layers/l1/publish?alt=json&force=true")
    assert(session.requests[0].data is None)
    session.queue(200, {"id": "m1", "contents": [{"type": "layer", "id": "l1"}]})
    created = ops.create_map(Map(name="m", projectId="p1", contents=[MapLayer(id="l1", name="roads")]))
    assert(isinstance(created.contents[0], MapLayer))
    body = json.loads(session.requests[1].data)
    assert(body["contents"] == [{"type": "layer", "id": "l1", "name": "roads"}])
    session.queue(200, {"id": "l2"})
    ops.create_layer(Layer(name="roads", datasources=[{"id": "t1"}]), process=True)
    assert(session.requests[2].url == BASE + "layers?alt=json&process=true")

def test_list_features(service, session):
    session.queue(200, {"type": "FeatureCollection",
                        "features": [{"type": "Feature",
                                      "geometry": {"type": "Polygon", "coordinates": [[[0, 0], [1, 0], [0, 0]]]},
                                      "properties": {"gx_id": "1"}}]})
    features = ops.list_features("t1", where="population > 1000", select=["gx_id", "geometry"])
    assert(isinstance(features[0].geometry, GeoJsonPolygon))
    assert(session.requests[0].url == BASE + "tables/t1/features?alt=json"
           "&select=gx_id%2Cgeometry&where=population+%3E+1000")

def test_list_features_bad_geometry(service, session):
    session.queue(200, {"features": [{"geometry": {"type": "Sphere"}}]})
    with pytest.raises(DecodeError):
        ops.list_features("t1")

def test_batch_insert_splits(service, session):
    for _ in range(3):
        session.queue(204)
    features = [Feature(geometry=GeoJsonPoint(coordinates=[i, i]), properties={"gx_id": str(i)})
                for i in range(MaxFeaturesPerBatch * 2 + 1)]
    assert(ops.batch_insert_features("t1", features) == 3)
    bodies = [json.loads(r.data) for r in session.requests]
    assert([len(b["features"]) for b in bodies] == [MaxFeaturesPerBatch, MaxFeaturesPerBatch, 1])
    assert(bodies[0]["features"][0] == {"type": "Feature", "geometry": {"type": "Point", "coordinates": [0, 0]},
                                        "properties": {"gx_id": "0"}})
    assert(session.requests[0].url == BASE + "tables/t1/features/batchInsert?alt=json")

def test_batch_delete(service, session):
    session.queue(204)
    assert(ops.batch_delete_features("t1", primaryKeys=["1", "2"]) == 1)
    assert(json.loads(session.requests[0].data) == {"primaryKeys": ["1", "2"]})
    with pytest.raises(ValueError):
        ops.batch_delete_features("t1")
    with pytest.raises(ValueError):
        ops.batch_delete_features("t1", primaryKeys=["1"], gx_ids=["2"])

def test_protocol_error_payload(service, session):
    session.queue(404, {"error": {"code": 404, "message": "Asset not found",
                                  "errors": [{"domain": "global", "reason": "notFound",
                                              "message": "Asset not found"}]}})
    with pytest.raises(ProtocolError) as e:
        service.assets.get("missing").execute()
    assert(e.value.payload.message == "Asset not found")
    assert(e.value.errors[0].reason == "notFound")

def test_ops_ask_for_mapsengine_scope():
    gws.reset()
    gws.scopes = "fitness-body-ro"
    importlib.reload(ops)
    assert(gws.scopes == ["https://www.googleapis.com/auth/fitness.body.read",
                          "https://www.googleapis.com/auth/mapsengine"])
    gws.reset()

def test_path_media_closed_after_upload(mapsengine, session, monkeypatch, tmp_path):
    opened = []
    def recording(source):
        mu = as_media_upload(source)
        opened.append(mu)
        return mu
    monkeypatch.setattr(media, "as_media_upload", recording)
    p = tmp_path / "data.csv"
    p.write_bytes(b"a,b\n1,2\n")
    session.queue(204)
    mapsengine.tables.files.insert("t1", filename="data.csv").media(p, "text/csv").execute()
    assert(session.requests[0].data == b"a,b\n1,2\n")
    assert(opened[0].stream().closed)
