"""
Constants for the hanging (Terminating) resources sweep.
"""

# Merge patch that drops every finalizer; other fields are left untouched
FINALIZERS_PATCH = {"metadata": {"finalizers": None}}
FINALIZERS_PATCH_JSON = '{"metadata":{"finalizers":null}}'
MERGE_PATCH_CONTENT_TYPE = "application/merge-patch+json"

# Backends for the cluster access layer
BACKEND_OC = "oc"
BACKEND_API = "api"
BACKENDS = (BACKEND_OC, BACKEND_API)

# Timeouts (seconds)
DEFAULT_OC_TIMEOUT = 60
WHOAMI_TIMEOUT = 15

BANNER_WIDTH = 41
