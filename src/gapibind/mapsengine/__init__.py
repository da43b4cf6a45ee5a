"""
Google Maps Engine v1 bindings
"""

# OAuth scope labels (see access.gws) the ops module asks for on import
MapsEngineScopes = ["mapsengine"]

# features per batchInsert/batchDelete request the API accepts
MaxFeaturesPerBatch = 50
