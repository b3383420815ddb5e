# ============================================================================
# HANDLERS MODULE
# ============================================================================
# STATUS: Core - Reconstructor and codec registries
# PURPOSE: Register and discover reconstructors; resolve codecs
# CREATED: 19 OCT 2026
# ============================================================================
"""
Handlers Module

Provides a decorator-based registration system for block reconstructors
and the codec registry used to build decoders.

Usage:
    from handlers import register_reconstructor, BlockReconstructor

    @register_reconstructor("stripe")
    class StripeReconstructor(BlockReconstructor):
        def process_file(self, source_path, parity_path, decoder): ...
        def process_parity_file(self, source_path, parity_path, decoder): ...

    # Later, inside a worker task:
    reconstructor = create_reconstructor("stripe", conf)
"""

from handlers.registry import (
    BlockReconstructor,
    register_reconstructor,
    get_reconstructor,
    get_reconstructor_or_raise,
    create_reconstructor,
    list_reconstructors,
    clear_reconstructors,
    ReconstructorError,
    ReconstructorNotFoundError,
    DuplicateReconstructorError,
)
from handlers.codecs import (
    Codec,
    Decoder,
    initialize_codecs,
    load_codecs_file,
    codecs_to_json,
    get_codec,
    list_codecs,
    CodecError,
    CodecNotFoundError,
)

# Import reconstructor modules to trigger registration
import handlers.examples  # noqa: F401 - import for side effects (echo, sleep, fail, flaky)

__all__ = [
    "BlockReconstructor",
    "register_reconstructor",
    "get_reconstructor",
    "get_reconstructor_or_raise",
    "create_reconstructor",
    "list_reconstructors",
    "clear_reconstructors",
    "ReconstructorError",
    "ReconstructorNotFoundError",
    "DuplicateReconstructorError",
    "Codec",
    "Decoder",
    "initialize_codecs",
    "load_codecs_file",
    "codecs_to_json",
    "get_codec",
    "list_codecs",
    "CodecError",
    "CodecNotFoundError",
]
