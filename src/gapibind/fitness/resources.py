"""
Fitness v1 resources.
https://developers.google.com/fit/rest/v1/reference
Field names follow the JSON names so a response dict can be splatted
straight in.  Timestamps the API sends as int64 strings (the *Millis and
*Nanos fields) are ints here and go back out as strings.
"""
from dataclasses import dataclass, field
from typing import List

from ..resources import ApiResourceBase

@dataclass
class Application(ApiResourceBase):
    """Application which feeds sensor data into the platform."""
    detailsUrl: str|None = field(default=None)
    name: str|None = field(default=None)
    packageName: str|None = field(default=None)
    version: str|None = field(default=None)

    def __bool__(self) -> bool:
        return bool(self.name) or bool(self.packageName)

@dataclass
class Device(ApiResourceBase):
    """
    An integrated device (such as a phone or a wearable) that can hold sensors.
    type is one of chestStrap, phone, scale, tablet, unknown, watch
    """
    manufacturer: str|None = field(default=None)
    model: str|None = field(default=None)
    type: str|None = field(default=None)
    uid: str|None = field(default=None)
    version: str|None = field(default=None)

@dataclass
class DataTypeField(ApiResourceBase):
    """
    One dimension of a data type.
    format is one of floatList, floatPoint, integer, integerList, map, string
    """
    format: str|None = field(default=None)
    name: str|None = field(default=None)
    optional: bool|None = field(default=None)

@dataclass
class DataType(ApiResourceBase):
    """Schema for a stream of data, names are namespaced (com.google.step_count.delta)."""
    # name has to be declared before field, which shadows dataclasses.field from there on
    name: str|None = field(default=None)
    field: List[DataTypeField]|None = field(default=None)

    _nested = {'field': DataTypeField}

@dataclass
class DataSource(ApiResourceBase):
    """
    https://developers.google.com/fit/rest/v1/reference/users/dataSources
    A unique source of sensor data.  dataStreamId can be left empty on
    create, the server derives it from the other fields.
    """
    application: Application|dict|None = field(default=None)
    dataStreamId: str|None = field(default=None)
    dataStreamName: str|None = field(default=None)
    dataType: DataType|dict|None = field(default=None)
    device: Device|dict|None = field(default=None)
    name: str|None = field(default=None)
    type: str|None = field(default=None)

    _nested = {'application': Application, 'dataType': DataType, 'device': Device}

    def __bool__(self) -> bool:
        return bool(self.dataStreamId)

    def __str__(self) -> str:
        if self:
            return f"{self.dataStreamId}:{self.name}"
        return "<empty>"

@dataclass
class Value(ApiResourceBase):
    """Only one of fpVal and intVal is set, depending on the data type field format."""
    fpVal: float|None = field(default=None)
    intVal: int|None = field(default=None)

@dataclass
class DataPoint(ApiResourceBase):
    """
    A single data point, values are in the order of the fields of the data
    type of its data source.
    """
    computationTimeMillis: int|None = field(default=None)
    dataTypeName: str|None = field(default=None)
    endTimeNanos: int|None = field(default=None)
    modifiedTimeMillis: int|None = field(default=None)
    originDataSourceId: str|None = field(default=None)
    rawTimestampNanos: int|None = field(default=None)
    startTimeNanos: int|None = field(default=None)
    value: List[Value]|None = field(default=None)

    _nested = {'value': Value}
    _int64 = ('computationTimeMillis', 'endTimeNanos', 'modifiedTimeMillis',
              'rawTimestampNanos', 'startTimeNanos')

@dataclass
class Dataset(ApiResourceBase):
    """
    https://developers.google.com/fit/rest/v1/reference/users/dataSources/datasets
    A possibly partial set of the data points of one data source.  When a
    get is too large for one response nextPageToken is set.
    """
    dataSourceId: str|None = field(default=None)
    maxEndTimeNs: int|None = field(default=None)
    minStartTimeNs: int|None = field(default=None)
    nextPageToken: str|None = field(default=None)
    point: List[DataPoint]|None = field(default=None)

    _nested = {'point': DataPoint}
    _int64 = ('maxEndTimeNs', 'minStartTimeNs')

    def __len__(self) -> int:
        return len(self.point) if self.point else 0

@dataclass
class Session(ApiResourceBase):
    """
    https://developers.google.com/fit/rest/v1/reference/users/sessions
    A session is a time interval with a user supplied name and activity.
    """
    activeTimeMillis: int|None = field(default=None)
    activityType: int|None = field(default=None)
    application: Application|dict|None = field(default=None)
    description: str|None = field(default=None)
    endTimeMillis: int|None = field(default=None)
    id: str|None = field(default=None)
    modifiedTimeMillis: int|None = field(default=None)
    name: str|None = field(default=None)
    startTimeMillis: int|None = field(default=None)

    _nested = {'application': Application}
    _int64 = ('activeTimeMillis', 'endTimeMillis', 'modifiedTimeMillis', 'startTimeMillis')

    def __bool__(self) -> bool:
        return bool(self.id)

    def __str__(self) -> str:
        if self:
            return f"{self.name}<{self.id}>({self.startTimeMillis}-->{self.endTimeMillis})"
        return "<empty>"

@dataclass
class ListDataSourcesResponse(ApiResourceBase):
    dataSource: List[DataSource]|None = field(default=None)

    _nested = {'dataSource': DataSource}

@dataclass
class ListSessionsResponse(ApiResourceBase):
    """deletedSession only has entries when includeDeleted was set."""
    deletedSession: List[Session]|None = field(default=None)
    nextPageToken: str|None = field(default=None)
    session: List[Session]|None = field(default=None)

    _nested = {'deletedSession': Session, 'session': Session}

@dataclass
class AggregateBy(ApiResourceBase):
    """Aggregate by data type name or by data source id."""
    dataSourceId: str|None = field(default=None)
    dataTypeName: str|None = field(default=None)
    outputDataSourceId: str|None = field(default=None)
    outputDataTypeName: str|None = field(default=None)

@dataclass
class BucketByActivity(ApiResourceBase):
    # default activity stream is used when activityDataSourceId is empty
    activityDataSourceId: str|None = field(default=None)
    minDurationMillis: int|None = field(default=None)

    _int64 = ('minDurationMillis',)

@dataclass
class BucketBySession(ApiResourceBase):
    minDurationMillis: int|None = field(default=None)

    _int64 = ('minDurationMillis',)

@dataclass
class BucketByTime(ApiResourceBase):
    durationMillis: int|None = field(default=None)

    _int64 = ('durationMillis',)

@dataclass
class AggregateRequest(ApiResourceBase):
    """
    https://developers.google.com/fit/rest/v1/reference/users/dataset/aggregate
    startTimeMillis/endTimeMillis are required, set at most one bucketBy*.
    """
    aggregateBy: List[AggregateBy]|None = field(default=None)
    bucketByActivitySegment: BucketByActivity|dict|None = field(default=None)
    bucketByActivityType: BucketByActivity|dict|None = field(default=None)
    bucketBySession: BucketBySession|dict|None = field(default=None)
    bucketByTime: BucketByTime|dict|None = field(default=None)
    endTimeMillis: int|None = field(default=None)
    startTimeMillis: int|None = field(default=None)

    _nested = {'aggregateBy': AggregateBy,
               'bucketByActivitySegment': BucketByActivity,
               'bucketByActivityType': BucketByActivity,
               'bucketBySession': BucketBySession,
               'bucketByTime': BucketByTime}
    _int64 = ('endTimeMillis', 'startTimeMillis')

    def fixup(self) -> None:
        super().fixup()
        buckets = [b for b in (self.bucketByActivitySegment, self.bucketByActivityType,
                               self.bucketBySession, self.bucketByTime) if b is not None]
        if len(buckets) > 1:
            raise ValueError("AggregateRequest takes at most one bucketBy* strategy")

@dataclass
class AggregateBucket(ApiResourceBase):
    """
    type is one of activitySegment, activityType, session, time, unknown.
    activity is set for the activity bucket types, session for session buckets.
    """
    activity: int|None = field(default=None)
    dataset: List[Dataset]|None = field(default=None)
    endTimeMillis: int|None = field(default=None)
    session: Session|dict|None = field(default=None)
    startTimeMillis: int|None = field(default=None)
    type: str|None = field(default=None)

    _nested = {'dataset': Dataset, 'session': Session}
    _int64 = ('endTimeMillis', 'startTimeMillis')

@dataclass
class AggregateResponse(ApiResourceBase):
    bucket: List[AggregateBucket]|None = field(default=None)

    _nested = {'bucket': AggregateBucket}
