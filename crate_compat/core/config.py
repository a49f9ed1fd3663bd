import os
from dotenv import load_dotenv

load_dotenv()

# logging
LOG_LEVEL = os.getenv("CRATE_COMPAT_LOG_LEVEL", "WARNING")

# manifest and crate layout
MANIFEST_FILE_NAME = os.getenv("CRATE_COMPAT_MANIFEST_NAME", "Cargo.toml")
DEFAULT_LIB_PATH = os.getenv("CRATE_COMPAT_DEFAULT_LIB_PATH", "src/lib.rs")

# encoding used for working tree files and git blobs
SOURCE_ENCODING = os.getenv("CRATE_COMPAT_SOURCE_ENCODING", "utf-8")
