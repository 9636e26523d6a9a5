"""Constants for the GitHub Operator."""

# API Group
API_GROUP = "github.cloud37.dev"
API_VERSION = "v1alpha1"
API_GROUP_VERSION = f"{API_GROUP}/{API_VERSION}"

# Resource Kinds
KIND_REPOSITORY = "Repository"
KIND_KEY = "Key"

# Resource plurals
PLURALS = {
    KIND_REPOSITORY: "repositories",
    KIND_KEY: "keys",
}

# Finalizers
REPOSITORY_FINALIZER = f"repository.finalizers.{API_GROUP}"
KEY_FINALIZER = f"key.finalizers.{API_GROUP}"

# Field Manager
FIELD_MANAGER = "github-operator"

# Phases
PHASE_CREATING = "Creating"
PHASE_WAITING = "Waiting"
PHASE_UPDATING = "Updating"
PHASE_SYNCED = "Synced"
PHASE_DELETING = "Deleting"

# Secret data keys
SECRET_PRIVATE_KEY = "identity"
SECRET_PUBLIC_KEY = "identity.pub"

# Event Reasons
EVENT_REASON_RECONCILE_STARTED = "ReconcileStarted"
EVENT_REASON_RECONCILE_FAILED = "ReconcileFailed"
EVENT_REASON_REPOSITORY_CREATED = "RepositoryCreated"
EVENT_REASON_REPOSITORY_SYNCED = "RepositorySynced"
EVENT_REASON_REPOSITORY_DELETED = "RepositoryDeleted"
EVENT_REASON_KEY_CREATED = "KeyCreated"
EVENT_REASON_KEY_DELETED = "KeyDeleted"
EVENT_REASON_KEY_DRIFT = "KeyDriftDetected"
EVENT_REASON_SECRET_CREATED = "SecretCreated"
EVENT_REASON_SECRET_CONFLICT = "SecretConflict"
