"""Constants shared across the OneFS Platform API client."""

HEADER_CONTENT_TYPE = "Content-Type"
CONTENT_TYPE_JSON = "application/json"
CONTENT_TYPE_BINARY = "binary/octet-stream"

DEFAULT_VOLUMES_PATH = "/ifs/volumes"
DEFAULT_VOLUME_ACL = "public_read_write"

# OneFS 8.0 ships PAPI version 3
MIN_API_VERSION = 3
FALLBACK_API_VERSION = 2

NAMESPACE_PATH = "namespace"
API_VERSION_PATH = "platform/latest"
QUOTA_PATH = "platform/1/quota/quotas"
SNAPSHOTS_PATH = "platform/1/snapshot/snapshots"
SNAPSHOT_DIR = ".snapshot"

HEADER_TARGET_TYPE = "x-isi-ifs-target-type"
HEADER_ACCESS_CONTROL = "x-isi-ifs-access-control"
HEADER_COPY_SOURCE = "x-isi-ifs-copy-source"

STREAM_CHUNK_SIZE = 64 * 1024

# Environment variables read by Settings.from_env()
ENV_ENDPOINT = "ISILON_ENDPOINT"
ENV_USERNAME = "ISILON_USERNAME"
ENV_PASSWORD = "ISILON_PASSWORD"
ENV_GROUP = "ISILON_GROUP"
ENV_VOLUMES_PATH = "ISILON_VOLUMEPATH"
ENV_INSECURE = "ISILON_INSECURE"
ENV_TIMEOUT = "ISILON_TIMEOUT"
ENV_DEBUG = "ISILON_DEBUG"
ENV_CONFIG = "ISILON_CONFIG"
ENV_PROFILE = "ISILON_PROFILE"
