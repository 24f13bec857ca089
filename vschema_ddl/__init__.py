import importlib.metadata

from .main import main
from .applier import SchemaDDLApplier, apply_vschema_ddl

try:
    __version__ = importlib.metadata.version("vschema-ddl")
except importlib.metadata.PackageNotFoundError:
    __version__ = "unknown"  # fallback version
