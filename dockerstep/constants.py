"""Fixed paths, names and defaults used throughout a build."""

import os

ROOT_DIR = "/"
MOUNT_INFO_PATH = "/proc/self/mountinfo"
DEFAULT_KANIKO_PATH = "/kaniko"
AUTHOR = "kaniko"

CONTEXT_TAR = "context.tar.gz"

SNAPSHOT_MODE_TIME = "time"
SNAPSHOT_MODE_FULL = "full"
SNAPSHOT_MODE_REDO = "redo"

NO_BASE_IMAGE = "scratch"

GCS_BUILD_CONTEXT_PREFIX = "gs://"
S3_BUILD_CONTEXT_PREFIX = "s3://"
LOCAL_DIR_BUILD_CONTEXT_PREFIX = "dir://"
GIT_BUILD_CONTEXT_PREFIX = "git://"
HTTPS_BUILD_CONTEXT_PREFIX = "https://"

HOME = "HOME"
DEFAULT_HOME_VALUE = "/root"
ROOT_USER = "root"

CMD = "CMD"
ENTRYPOINT = "ENTRYPOINT"

DOCKERIGNORE = ".dockerignore"

S3_ENDPOINT_ENV = "S3_ENDPOINT"
S3_FORCE_PATH_STYLE = "S3_FORCE_PATH_STYLE"

SCRATCH_ENV_VARS = ("PATH=/usr/local/sbin:/usr/local/bin:/usr/sbin:/usr/bin:/sbin:/bin",)

AZURE_BLOB_STORAGE_HOST_REGEX = (
    r"https://(.+?)\.blob\.core\.windows\.net/(.+)",
    r"https://(.+?)\.blob\.core\.chinacloudapi\.cn/(.+)",
    r"https://(.+?)\.blob\.core\.cloudapi\.de/(.+)",
    r"https://(.+?)\.blob\.core\.usgovcloudapi\.net/(.+)",
)


def kaniko_dir() -> str:
    """The working directory of the builder, overridable through KANIKO_DIR."""
    return os.environ.get("KANIKO_DIR", DEFAULT_KANIKO_PATH)


def dockerfile_path() -> str:
    """Where the Dockerfile is copied to."""
    return f"{kaniko_dir()}/Dockerfile"


def build_context_dir() -> str:
    """Where a fetched build context is unpacked."""
    return f"{kaniko_dir()}/buildcontext/"


def intermediate_stages_dir() -> str:
    """Where intermediate stages are stored as tarballs."""
    return f"{kaniko_dir()}/stages/"