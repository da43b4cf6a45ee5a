"""
Google Fitness v1 bindings
"""

# the authenticated user, valid wherever a userId is expected
ME = "me"

# OAuth scope labels (see access.gws) the ops module asks for on import,
# the write scopes cover reading as well
FitnessScopes = ["fitness-activity", "fitness-body", "fitness-location"]
