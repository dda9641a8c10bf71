"""
Compiler passes.
"""

from .base import CompileContext, BasePass, PassManager
from .pattern_graph import PatternGraphBuilderPass
from .anchor_resolution import AnchorResolverPass
from .path_compression import PathCompressor, CompressedChain
from .binding_compiler import BindingCompilerPass
from .post_processing import BindingPostProcessorPass
from .plan_verification import PlanVerificationPass
