"""
Shared components: errors and token locations.
"""

from .source_location import TokenLocation
from .errors import (
    PatternError,
    PatternCompileError,
    PatternRuntimeError,
    MalformedToken,
    DuplicateOrConflictingName,
    UnsupportedNamedEdge,
    UnsupportedArgumentEdge,
    AmbiguousAnonymousChain,
    UnresolvedBackendContext,
    UnsupportedEdgeDirection,
    UnboundFormName,
)
from .backend_kind import BackendKind
