# ============================================================================
# CODEC REGISTRY
# ============================================================================
# STATUS: Core - Erasure codec definitions and decoder handle
# PURPOSE: Resolve codec_id to a codec and build the Decoder passed to reconstructors
# CREATED: 19 OCT 2026
# ============================================================================
"""
Codec Registry

A codec is a named erasure-coding layout (stripe length, parity length,
code family). Worker tasks call initialize_codecs(conf) during setup and
then resolve the job's codec_id with get_codec().

Codec definitions come from:
1. The JSON list stored under erasure_coding.codecs.json in the job
   configuration. At startup the service fills it from the YAML file
   named by BLOCKFIX_CODECS_FILE (load_codecs_file + codecs_to_json).
2. Built-in defaults (rs, xor, src) when the key is absent.

The decoding math belongs to the reconstructor implementation; Decoder
only binds a codec to the job configuration.
"""

import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError

from core.config.configuration import Configuration
from core.config.defaults import CODECS_JSON

logger = logging.getLogger(__name__)


# ============================================================================
# EXCEPTIONS
# ============================================================================

class CodecError(Exception):
    """Base exception for codec registry errors."""
    pass


class CodecNotFoundError(CodecError):
    """Raised when a codec id is not registered."""
    def __init__(self, codec_id: str):
        self.codec_id = codec_id
        super().__init__(f"Codec not found: {codec_id}")


# ============================================================================
# MODELS
# ============================================================================

class Codec(BaseModel):
    """One erasure-coding scheme."""
    id: str = Field(..., min_length=1, description="Codec id referenced by codec_id")
    stripe_length: int = Field(..., ge=1, description="Data blocks per stripe")
    parity_length: int = Field(..., ge=1, description="Parity blocks per stripe")
    erasure_code: str = Field(..., min_length=1, description="Code family, e.g. reed_solomon")
    priority: int = Field(default=0, description="Higher wins when several codecs apply")
    parity_directory: str = Field(default="/raid", description="Where parity files live")
    description: str = ""

    model_config = {"frozen": True}


DEFAULT_CODECS: List[Dict[str, Any]] = [
    {
        "id": "rs",
        "stripe_length": 10,
        "parity_length": 4,
        "erasure_code": "reed_solomon",
        "priority": 300,
        "parity_directory": "/raidrs",
        "description": "Reed-Solomon (10, 4)",
    },
    {
        "id": "src",
        "stripe_length": 10,
        "parity_length": 6,
        "erasure_code": "simple_regenerating",
        "priority": 200,
        "parity_directory": "/raidsrc",
        "description": "Simple regenerating code (10, 6)",
    },
    {
        "id": "xor",
        "stripe_length": 10,
        "parity_length": 1,
        "erasure_code": "xor",
        "priority": 100,
        "parity_directory": "/raid",
        "description": "XOR parity (10, 1)",
    },
]


class Decoder:
    """Codec bound to a job configuration, handed to reconstructors."""

    def __init__(self, conf: Configuration, codec: Codec):
        self.conf = conf
        self.codec = codec

    @property
    def stripe_length(self) -> int:
        return self.codec.stripe_length

    @property
    def parity_length(self) -> int:
        return self.codec.parity_length

    def __repr__(self) -> str:
        return f"Decoder(codec={self.codec.id}, {self.stripe_length}+{self.parity_length})"


# ============================================================================
# REGISTRY
# ============================================================================

_codecs: Dict[str, Codec] = {}
_codecs_lock = threading.Lock()


def _parse_codecs(specs: Any, source: str) -> Dict[str, Codec]:
    if isinstance(specs, dict) and "codecs" in specs:
        specs = specs["codecs"]
    if not isinstance(specs, list):
        raise CodecError(f"Codec definitions in {source} must be a list")

    parsed: Dict[str, Codec] = {}
    for spec in specs:
        try:
            codec = Codec.model_validate(spec)
        except ValidationError as e:
            raise CodecError(f"Invalid codec definition in {source}: {e}") from e
        if codec.id in parsed:
            raise CodecError(f"Duplicate codec id '{codec.id}' in {source}")
        parsed[codec.id] = codec
    return parsed


def _install(codecs: Dict[str, Codec]) -> None:
    global _codecs
    with _codecs_lock:
        _codecs = codecs
    logger.debug(f"Installed codecs: {sorted(codecs)}")


def initialize_codecs(conf: Configuration) -> List[Codec]:
    """
    (Re)load the codec registry from a job configuration.

    Uses erasure_coding.codecs.json when present, otherwise the defaults.

    Raises:
        CodecError if the JSON is malformed or a definition is invalid
    """
    raw = conf.get(CODECS_JSON)
    if raw is None or not raw.strip():
        codecs = _parse_codecs(DEFAULT_CODECS, "defaults")
    else:
        try:
            specs = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CodecError(f"Could not parse {CODECS_JSON}: {e}") from e
        codecs = _parse_codecs(specs, CODECS_JSON)

    _install(codecs)
    return list(codecs.values())


def load_codecs_file(path: Union[str, Path]) -> List[Codec]:
    """Load codec definitions from a YAML file and install them."""
    with open(path, "r") as f:
        specs = yaml.safe_load(f)
    codecs = _parse_codecs(specs, str(path))
    _install(codecs)
    return list(codecs.values())


def codecs_to_json(codecs: List[Codec]) -> str:
    """Serialize codecs for the erasure_coding.codecs.json job key."""
    return json.dumps([codec.model_dump() for codec in codecs])


def get_codec(codec_id: Optional[str]) -> Codec:
    """
    Resolve a codec id.

    Raises:
        CodecNotFoundError if the id is unknown
    """
    codec = _codecs.get(codec_id or "")
    if codec is None:
        raise CodecNotFoundError(str(codec_id))
    return codec


def list_codecs() -> List[Codec]:
    """Registered codecs, highest priority first."""
    return sorted(_codecs.values(), key=lambda c: c.priority, reverse=True)


def clear_codecs() -> None:
    """
    Clear the registry.

    Primarily for testing.
    """
    _install({})


__all__ = [
    "Codec",
    "Decoder",
    "DEFAULT_CODECS",
    "initialize_codecs",
    "load_codecs_file",
    "codecs_to_json",
    "get_codec",
    "list_codecs",
    "clear_codecs",
    "CodecError",
    "CodecNotFoundError",
]
