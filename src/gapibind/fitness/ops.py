from datetime import datetime
from functools import partial
from typing import List

from . import ME, FitnessScopes
from .resources import (AggregateRequest, AggregateResponse, DataPoint, DataSource,
                        Dataset, Session)
from ..access import gws

gws.append_scopes(FitnessScopes)

# module level rather than a class holding the service, same effect
_get_service = partial(gws.get_service, "fitness", "v1")

def dataset_id(start_ns: int, end_ns: int) -> str:
    """
    Dataset identifier: the minimum start and maximum end time of the points
    it covers, in nanoseconds since the epoch, joined with a dash.
    """
    if start_ns < 0 or end_ns < start_ns:
        raise ValueError(f"invalid dataset range {start_ns}-{end_ns}")
    return f"{start_ns}-{end_ns}"

def to_nanos(t: datetime) -> int:
    """Aware datetime to nanoseconds since the epoch."""
    return int(t.timestamp()) * 1_000_000_000 + t.microsecond * 1000

def to_millis(t: datetime) -> int:
    return int(t.timestamp()) * 1000 + t.microsecond // 1000

def list_data_sources(dataTypeName: str|List[str]|None = None,
                      userId: str = ME) -> List[DataSource]:
    """
    Wrapper for users.dataSources.list
    https://developers.google.com/fit/rest/v1/reference/users/dataSources/list
    All data sources visible to this developer project, optionally only those
    of the given data type(s).
    """
    names = [dataTypeName] if isinstance(dataTypeName, str) else dataTypeName
    response = _get_service().users.dataSources.list(userId, dataTypeName=names).execute()
    return response.dataSource or []

def get_data_source(dataSourceId: str, userId: str = ME) -> DataSource:
    """
    Wrapper for users.dataSources.get
    https://developers.google.com/fit/rest/v1/reference/users/dataSources/get
    """
    return _get_service().users.dataSources.get(userId, dataSourceId).execute()

def create_data_source(source: DataSource|dict, userId: str = ME) -> DataSource:
    """
    Wrapper for users.dataSources.create
    https://developers.google.com/fit/rest/v1/reference/users/dataSources/create
    Returns the created data source, with the dataStreamId the server assigned.
    """
    body = source if isinstance(source, DataSource) else DataSource.from_base(source)
    return _get_service().users.dataSources.create(userId, body).execute()

def patch_data_source(source: DataSource, userId: str = ME, **changes) -> DataSource:
    """
    Wrapper for users.dataSources.patch
    https://developers.google.com/fit/rest/v1/reference/users/dataSources/patch
    Only the named fields are sent, e.g. patch_data_source(src, name="steps").
    The local source is updated as well.
    """
    if not source.dataStreamId:
        raise ValueError("data source has no dataStreamId to patch")
    body = source.patch(**changes)
    return _get_service().users.dataSources.patch(userId, source.dataStreamId, body).execute()

def delete_data_source(dataSourceId: str, userId: str = ME) -> DataSource:
    """
    Wrapper for users.dataSources.delete
    https://developers.google.com/fit/rest/v1/reference/users/dataSources/delete
    Only data sources without any data points can be deleted.
    """
    return _get_service().users.dataSources.delete(userId, dataSourceId).execute()

def get_dataset_points(dataSourceId: str,
                       start_ns: int,
                       end_ns: int,
                       limit: int|None = None,
                       userId: str = ME) -> List[DataPoint]:
    """
    Wrapper for users.dataSources.datasets.get
    https://developers.google.com/fit/rest/v1/reference/users/dataSources/datasets/get
    Every point of the data source between start_ns and end_ns, following
    nextPageToken as often as needed.  limit caps the points per page.
    """
    call = _get_service().users.dataSources.datasets.get(userId, dataSourceId,
                                                         dataset_id(start_ns, end_ns),
                                                         limit=limit)
    points = []
    for page in call.pages():
        points.extend(page.point or [])
    return points

def patch_dataset(dataSourceId: str,
                  points: List[DataPoint],
                  userId: str = ME) -> Dataset:
    """
    Wrapper for users.dataSources.datasets.patch
    https://developers.google.com/fit/rest/v1/reference/users/dataSources/datasets/patch
    Adds points to the data source.  The dataset id is derived from the points.
    """
    if not points:
        raise ValueError("patch_dataset needs at least one data point")
    start = min(p.startTimeNanos for p in points)
    end = max(p.endTimeNanos for p in points)
    body = Dataset(dataSourceId=dataSourceId, minStartTimeNs=start, maxEndTimeNs=end, point=points)
    return _get_service().users.dataSources.datasets.patch(userId, dataSourceId,
                                                           dataset_id(start, end), body).execute()

def delete_dataset(dataSourceId: str,
                   start_ns: int,
                   end_ns: int,
                   userId: str = ME) -> None:
    """
    Wrapper for users.dataSources.datasets.delete
    https://developers.google.com/fit/rest/v1/reference/users/dataSources/datasets/delete
    """
    _get_service().users.dataSources.datasets.delete(userId, dataSourceId,
                                                     dataset_id(start_ns, end_ns)).execute()

def aggregate(request: AggregateRequest, userId: str = ME) -> AggregateResponse:
    """
    Wrapper for users.dataset.aggregate
    https://developers.google.com/fit/rest/v1/reference/users/dataset/aggregate
    """
    return _get_service().users.dataset.aggregate(userId, request).execute()

def list_sessions(startTime: datetime|str|None = None,
                  endTime: datetime|str|None = None,
                  includeDeleted: bool = False,
                  userId: str = ME) -> List[Session]:
    """
    Wrapper for users.sessions.list
    https://developers.google.com/fit/rest/v1/reference/users/sessions/list
    All sessions overlapping the interval, times are RFC3339.  Deleted
    sessions are only returned when includeDeleted is set, and then only
    the deleted ones.
    """
    call = _get_service().users.sessions.list(userId)
    if startTime is not None:
        call.set("startTime", startTime.isoformat() if isinstance(startTime, datetime) else startTime)
    if endTime is not None:
        call.set("endTime", endTime.isoformat() if isinstance(endTime, datetime) else endTime)
    if includeDeleted:
        call.set("includeDeleted", True)
    sessions = []
    for page in call.pages():
        sessions.extend((page.deletedSession if includeDeleted else page.session) or [])
    return sessions

def update_session(session: Session, userId: str = ME) -> Session:
    """
    Wrapper for users.sessions.update
    https://developers.google.com/fit/rest/v1/reference/users/sessions/update
    Creates the session if its id isn't known yet.
    """
    if not session:
        raise ValueError("session needs an id")
    return _get_service().users.sessions.update(userId, session.id, session).execute()

def delete_session(sessionId: str, userId: str = ME) -> None:
    """
    Wrapper for users.sessions.delete
    https://developers.google.com/fit/rest/v1/reference/users/sessions/delete
    """
    _get_service().users.sessions.delete(userId, sessionId).execute()
