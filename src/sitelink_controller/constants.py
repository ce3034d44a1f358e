"""Constants for the site link controller."""

# API Group
API_GROUP = "skupper.io"
API_VERSION = "v2alpha1"
API_GROUP_VERSION = f"{API_GROUP}/{API_VERSION}"

# Resource Kinds
KIND_SITE = "Site"
KIND_LINK = "Link"
KIND_CERTIFICATE = "Certificate"
KIND_SECURED_ACCESS = "SecuredAccess"
KIND_POD = "Pod"
KIND_SECRET = "Secret"

# Field Manager
FIELD_MANAGER = "sitelink-controller"
CONTROLLER_NAME = "sitelink-controller"

# Condition Types
COND_READY = "Ready"
COND_CONFIGURED = "Configured"

# Condition Status values
STATUS_TRUE = "True"
STATUS_FALSE = "False"
STATUS_UNKNOWN = "Unknown"

# Wait milestones
MILESTONE_READY = "ready"
MILESTONE_CONFIGURED = "configured"
MILESTONE_NONE = "none"
WAIT_STATUS_TYPES = [MILESTONE_READY, MILESTONE_CONFIGURED, MILESTONE_NONE]

# Reconcile results
RESULT_CREATED = "created"
RESULT_UPDATED = "updated"
RESULT_UNCHANGED = "unchanged"

# Grant server
GRANT_SERVER_NAME = "skupper-grant-server"
GRANT_SERVER_CA_NAME = "skupper-grant-server-ca"
GRANT_SERVER_CA_SUBJECT = "SkupperGrantServerCA"
GRANT_SERVER_PORT_NAME = "https"
DEFAULT_GRANT_SERVER_PORT = 9090

# Event Reasons
EVENT_REASON_RESOURCE_CREATED = "ResourceCreated"
EVENT_REASON_RESOURCE_UPDATED = "ResourceUpdated"
EVENT_REASON_RESOURCE_UNCHANGED = "ResourceUnchanged"
EVENT_REASON_RECONCILE_FAILED = "ReconcileFailed"
EVENT_REASON_WAIT_SUCCEEDED = "WaitSucceeded"
EVENT_REASON_WAIT_FAILED = "WaitFailed"
EVENT_REASON_WAIT_TIMEOUT = "WaitTimeout"
EVENT_REASON_GRANT_CONFIGURED = "GrantServerConfigured"
EVENT_REASON_GRANT_URL_CHANGED = "GrantServerUrlChanged"

# User-facing hint when the custom resource definitions are missing
CRD_HELP_ERROR = 'The Skupper CRDs are not yet installed. To install them, run "skupper install"'
