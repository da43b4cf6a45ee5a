"""
Fitness v1 method table.
https://developers.google.com/fit/rest/v1/reference
"""
from ..call import ApiService, MethodSpec, QueryParam
from .resources import (AggregateRequest, AggregateResponse, DataSource, Dataset,
                        ListDataSourcesResponse, ListSessionsResponse, Session)

_DATASET_PATH = "{userId}/dataSources/{dataSourceId}/datasets/{datasetId}"

METHODS = (
    MethodSpec("fitness.users.dataSources.create", "POST",
               "{userId}/dataSources",
               parameter_order=("userId",),
               request=DataSource, response=DataSource),
    MethodSpec("fitness.users.dataSources.delete", "DELETE",
               "{userId}/dataSources/{dataSourceId}",
               parameter_order=("userId", "dataSourceId"),
               response=DataSource),
    MethodSpec("fitness.users.dataSources.get", "GET",
               "{userId}/dataSources/{dataSourceId}",
               parameter_order=("userId", "dataSourceId"),
               response=DataSource),
    MethodSpec("fitness.users.dataSources.list", "GET",
               "{userId}/dataSources",
               parameter_order=("userId",),
               query={"dataTypeName": QueryParam(repeated=True)},
               response=ListDataSourcesResponse),
    MethodSpec("fitness.users.dataSources.patch", "PATCH",
               "{userId}/dataSources/{dataSourceId}",
               parameter_order=("userId", "dataSourceId"),
               request=DataSource, response=DataSource),
    MethodSpec("fitness.users.dataSources.update", "PUT",
               "{userId}/dataSources/{dataSourceId}",
               parameter_order=("userId", "dataSourceId"),
               request=DataSource, response=DataSource),
    # no response body on delete
    MethodSpec("fitness.users.dataSources.datasets.delete", "DELETE",
               _DATASET_PATH,
               parameter_order=("userId", "dataSourceId", "datasetId"),
               query={"currentTimeMillis": QueryParam(),
                      "modifiedTimeMillis": QueryParam()}),
    MethodSpec("fitness.users.dataSources.datasets.get", "GET",
               _DATASET_PATH,
               parameter_order=("userId", "dataSourceId", "datasetId"),
               query={"limit": QueryParam(),
                      "pageToken": QueryParam()},
               response=Dataset),
    MethodSpec("fitness.users.dataSources.datasets.patch", "PATCH",
               _DATASET_PATH,
               parameter_order=("userId", "dataSourceId", "datasetId"),
               query={"currentTimeMillis": QueryParam()},
               request=Dataset, response=Dataset),
    MethodSpec("fitness.users.dataset.aggregate", "POST",
               "{userId}/dataset:aggregate",
               parameter_order=("userId",),
               request=AggregateRequest, response=AggregateResponse),
    MethodSpec("fitness.users.sessions.delete", "DELETE",
               "{userId}/sessions/{sessionId}",
               parameter_order=("userId", "sessionId"),
               query={"currentTimeMillis": QueryParam()}),
    MethodSpec("fitness.users.sessions.list", "GET",
               "{userId}/sessions",
               parameter_order=("userId",),
               query={"endTime": QueryParam(),
                      "includeDeleted": QueryParam(),
                      "pageToken": QueryParam(),
                      "startTime": QueryParam()},
               response=ListSessionsResponse),
    MethodSpec("fitness.users.sessions.update", "PUT",
               "{userId}/sessions/{sessionId}",
               parameter_order=("userId", "sessionId"),
               query={"currentTimeMillis": QueryParam()},
               request=Session, response=Session),
)

class FitnessService(ApiService):
    """
    Fitness v1.  fitness.users.dataSources.list("me").execute() and so on,
    see METHODS for everything available.
    """
    api_name = "fitness"
    api_version = "v1"
    service_path = "fitness/v1/users/"
    methods = METHODS
