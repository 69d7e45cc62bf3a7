"""Constants for the QuObject Operator."""

# API Group
API_GROUP = "quobject.io"
API_VERSION = "v1alpha1"
API_GROUP_VERSION = f"{API_GROUP}/{API_VERSION}"

# Resource Kinds
KIND_BUCKET_CLAIM = "QuObjectBucketClaim"
PLURAL_BUCKET_CLAIM = "quobjectbucketclaims"

# Labels
LABEL_MANAGED_BY = f"{API_GROUP}/managed-by"
LABEL_CLAIM_NAME = f"{API_GROUP}/claim-name"

# Annotations
ANNOTATION_BUCKET_NAME = f"{API_GROUP}/bucket-name"
ANNOTATION_RETAIN_POLICY = f"{API_GROUP}/retain-policy"
ANNOTATION_RESYNC = f"{API_GROUP}/resync-requested-at"

# Finalizers
FINALIZER = f"{API_GROUP}/finalizer"

# Field Manager / controller name
FIELD_MANAGER = "quobject-operator"

# Claim phases
PHASE_PENDING = "Pending"
PHASE_BOUND = "Bound"
PHASE_ERROR = "Error"

# Retain policies
RETAIN_POLICY_RETAIN = "Retain"
RETAIN_POLICY_DELETE = "Delete"
DEFAULT_RETAIN_POLICY = RETAIN_POLICY_RETAIN

# Generated artifact names
SECRET_NAME_SUFFIX = "-bucket-secret"
CONFIG_MAP_NAME_SUFFIX = "-bucket-config"

# Artifact keys
KEY_ACCESS_KEY_ID = "AWS_ACCESS_KEY_ID"
KEY_SECRET_ACCESS_KEY = "AWS_SECRET_ACCESS_KEY"
KEY_BUCKET_NAME = "BUCKET_NAME"
KEY_BUCKET_HOST = "BUCKET_HOST"
KEY_BUCKET_REGION = "BUCKET_REGION"
KEY_BUCKET_PORT = "BUCKET_PORT"

# Credential secret fields
CRED_ENDPOINT = "endpoint"
CRED_REGION = "region"
CRED_ACCESS_KEY = "accessKey"
CRED_SECRET_KEY = "secretKey"
CRED_USE_SSL = "useSSL"
CRED_INSECURE_SKIP_VERIFY = "insecureSkipVerify"

# Name generation
BUCKET_SUFFIX_ALPHABET = "abcdefghijklmnopqrstuvwxyz0123456789"
BUCKET_SUFFIX_LENGTH = 5

# Condition Types
COND_READY = "Ready"
COND_CREDENTIALS_INVALID = "CredentialsInvalid"
COND_BUCKET_NOT_READY = "BucketNotReady"
COND_ARTIFACTS_NOT_SYNCED = "ArtifactsNotSynced"

# Event Reasons
EVENT_REASON_RECONCILE_STARTED = "ReconcileStarted"
EVENT_REASON_RECONCILE_FAILED = "ReconcileFailed"
EVENT_REASON_FINALIZER_ADDED = "FinalizerAdded"
EVENT_REASON_BUCKET_CREATED = "BucketCreated"
EVENT_REASON_BUCKET_DELETED = "BucketDeleted"
EVENT_REASON_BUCKET_RETAINED = "BucketRetained"
EVENT_REASON_BUCKET_DELETE_FAILED = "BucketDeleteFailed"
EVENT_REASON_ARTIFACTS_SYNCED = "ArtifactsSynced"
EVENT_REASON_CLAIM_BOUND = "ClaimBound"
