# ============================================================================
# RECONSTRUCTOR + CODEC REGISTRY TESTS
# ============================================================================
# STATUS: Tests - handlers package
# PURPOSE: Verify reconstructor registration/lookup, codecs and examples
# CREATED: 19 OCT 2026
# ============================================================================
"""
Reconstructor + Codec Registry Tests

Covers:
1. Decorator registration by short and qualified name
2. Duplicate / non-subclass registration
3. Unknown names and constructor failures
4. Codec loading from defaults, job JSON and YAML files
5. Example reconstructors

Run with:
    pytest tests/test_handlers.py -v
"""

import json

import pytest

import handlers.registry as registry
from core.config.configuration import Configuration
from core.config.defaults import CODECS_JSON
from handlers.codecs import (
    Codec,
    CodecError,
    CodecNotFoundError,
    Decoder,
    codecs_to_json,
    get_codec,
    initialize_codecs,
    list_codecs,
    load_codecs_file,
)
from handlers.examples import (
    FAIL_MESSAGE,
    FLAKY_FAILURE_RATE,
    EchoReconstructor,
    FailReconstructor,
    FlakyReconstructor,
)
from handlers.registry import (
    BlockReconstructor,
    DuplicateReconstructorError,
    ReconstructorNotFoundError,
    create_reconstructor,
    get_reconstructor,
    list_reconstructors,
    qualified_name,
    register_reconstructor,
)


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def isolated_registry():
    """Snapshot the registry and restore it after the test."""
    saved = dict(registry._reconstructors)
    saved_metadata = dict(registry._reconstructor_metadata)
    yield
    registry.clear_reconstructors()
    registry._reconstructors.update(saved)
    registry._reconstructor_metadata.update(saved_metadata)


@pytest.fixture
def default_codecs():
    initialize_codecs(Configuration())
    yield
    initialize_codecs(Configuration())


class _Noop(BlockReconstructor):
    def process_file(self, source_path, parity_path, decoder):
        pass

    def process_parity_file(self, source_path, parity_path, decoder):
        pass


# ============================================================================
# RECONSTRUCTOR REGISTRY
# ============================================================================

class TestRegisterReconstructor:

    def test_short_and_qualified_names(self, isolated_registry):
        @register_reconstructor("noop_test", description="does nothing")
        class NoopTest(_Noop):
            pass

        assert get_reconstructor("noop_test") is NoopTest
        assert get_reconstructor(qualified_name(NoopTest)) is NoopTest
        names = [entry["name"] for entry in list_reconstructors()]
        assert "noop_test" in names

    def test_duplicate_name_rejected(self, isolated_registry):
        with pytest.raises(DuplicateReconstructorError):
            @register_reconstructor("echo")
            class AnotherEcho(_Noop):
                pass

    def test_non_subclass_rejected(self, isolated_registry):
        with pytest.raises(TypeError):
            @register_reconstructor("not_a_reconstructor")
            class NotAReconstructor:
                pass

    def test_examples_registered(self):
        for name in ("echo", "sleep", "fail", "flaky"):
            assert get_reconstructor(name) is not None
        assert get_reconstructor("handlers.examples.EchoReconstructor") is EchoReconstructor


class TestCreateReconstructor:

    def test_creates_with_configuration(self):
        conf = Configuration(values={"k": "v"})
        reconstructor = create_reconstructor("echo", conf)
        assert isinstance(reconstructor, EchoReconstructor)
        assert reconstructor.conf is conf

    def test_unknown_name(self):
        with pytest.raises(ReconstructorNotFoundError, match="org.example.Missing"):
            create_reconstructor("org.example.Missing", Configuration())

    def test_constructor_failure_wrapped(self, isolated_registry):
        @register_reconstructor("broken_ctor")
        class BrokenCtor(_Noop):
            def __init__(self, conf):
                raise ValueError("boom")

        with pytest.raises(OSError, match="Could not instantiate a block reconstructor") as exc_info:
            create_reconstructor("broken_ctor", Configuration())
        assert isinstance(exc_info.value.__cause__, ValueError)


# ============================================================================
# CODECS
# ============================================================================

class TestCodecs:

    def test_defaults(self, default_codecs):
        assert get_codec("rs").parity_length == 4
        assert [c.id for c in list_codecs()] == ["rs", "src", "xor"]

    def test_unknown_codec(self, default_codecs):
        with pytest.raises(CodecNotFoundError):
            get_codec("rs-6-3")
        with pytest.raises(CodecNotFoundError):
            get_codec(None)

    def test_json_from_job_configuration(self, default_codecs):
        conf = Configuration()
        conf.set(CODECS_JSON, json.dumps([
            {"id": "rs-6-3", "stripe_length": 6, "parity_length": 3, "erasure_code": "reed_solomon"},
        ]))

        codecs = initialize_codecs(conf)

        assert [c.id for c in codecs] == ["rs-6-3"]
        decoder = Decoder(conf, get_codec("rs-6-3"))
        assert (decoder.stripe_length, decoder.parity_length) == (6, 3)
        with pytest.raises(CodecNotFoundError):
            get_codec("rs")

    def test_malformed_json(self, default_codecs):
        conf = Configuration(values={CODECS_JSON: "[{"})
        with pytest.raises(CodecError):
            initialize_codecs(conf)

    def test_invalid_definition(self, default_codecs):
        conf = Configuration(values={CODECS_JSON: json.dumps([{"id": "bad", "stripe_length": 0}])})
        with pytest.raises(CodecError, match="Invalid codec definition"):
            initialize_codecs(conf)

    def test_duplicate_id(self, default_codecs):
        spec = {"id": "x", "stripe_length": 2, "parity_length": 1, "erasure_code": "xor"}
        conf = Configuration(values={CODECS_JSON: json.dumps([spec, spec])})
        with pytest.raises(CodecError, match="Duplicate codec id"):
            initialize_codecs(conf)

    def test_yaml_file_forwarded_as_json(self, default_codecs, tmp_path):
        path = tmp_path / "codecs.yaml"
        path.write_text(
            "codecs:\n"
            "  - id: rs-6-3\n"
            "    stripe_length: 6\n"
            "    parity_length: 3\n"
            "    erasure_code: reed_solomon\n"
            "    priority: 10\n"
        )

        loaded = load_codecs_file(path)
        conf = Configuration(values={CODECS_JSON: codecs_to_json(loaded)})
        initialize_codecs(Configuration())  # back to defaults
        initialize_codecs(conf)

        assert get_codec("rs-6-3") == Codec(
            id="rs-6-3", stripe_length=6, parity_length=3, erasure_code="reed_solomon", priority=10,
        )


# ============================================================================
# EXAMPLE RECONSTRUCTORS
# ============================================================================

class TestExampleReconstructors:

    def test_echo_records_calls(self):
        EchoReconstructor.reset_history()
        echo = EchoReconstructor(Configuration())
        echo.process_file("/f/a", "/p/a", None)
        echo.process_parity_file("/f/b", "/p/b", None)

        assert EchoReconstructor.history == [
            ("process_file", "/f/a", "/p/a"),
            ("process_parity_file", "/f/b", "/p/b"),
        ]
        EchoReconstructor.reset_history()

    def test_fail_uses_configured_message(self):
        fail = FailReconstructor(Configuration(values={FAIL_MESSAGE: "disk gone"}))
        with pytest.raises(RuntimeError, match="disk gone: /p/a"):
            fail.process_parity_file("/f/a", "/p/a", None)

    def test_flaky_at_zero_rate_succeeds(self):
        flaky = FlakyReconstructor(Configuration(values={FLAKY_FAILURE_RATE: "0.0"}))
        for _ in range(20):
            flaky.process_file("/f/a", "/p/a", None)

    def test_flaky_at_full_rate_fails(self):
        flaky = FlakyReconstructor(Configuration(values={FLAKY_FAILURE_RATE: "1.0"}))
        with pytest.raises(RuntimeError, match="Random failure"):
            flaky.process_file("/f/a", "/p/a", None)
