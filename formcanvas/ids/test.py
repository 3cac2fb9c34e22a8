"""Tests for the identifier generator."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from .lib import IdGenerator, get_id_generator, reset_id_generator


class TestIdGenerator:
    """Tests for IdGenerator."""

    @pytest.mark.unit
    def test_ids_embed_kind_and_token(self):
        ids = IdGenerator(token="t")
        assert ids.next_id("section") == "section_t1"
        assert ids.next_id("field") == "field_t2"

    @pytest.mark.unit
    def test_issued_counter(self):
        ids = IdGenerator(token="t")
        for _ in range(5):
            ids.next_id("row")
        assert ids.issued == 5

    @pytest.mark.unit
    def test_random_token_differs_between_generators(self):
        assert IdGenerator().token != IdGenerator().token

    @pytest.mark.unit
    def test_no_duplicates_under_threads(self):
        """Interleaved callers never receive the same id."""
        ids = IdGenerator(token="x")
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda _: ids.next_id("field"), range(2000)))
        assert len(set(results)) == 2000

    @pytest.mark.unit
    def test_reserve_moves_counter_past_existing(self):
        ids = IdGenerator(token="p")
        ids.reserve(["form_p1", "section_p12", "row_p3"])
        assert ids.next_id("row") == "row_p13"

    @pytest.mark.parametrize(
        "existing",
        [
            pytest.param(["section_q40", "field_a", "form_1"], id="other-tokens"),
            pytest.param([], id="empty"),
        ],
    )
    @pytest.mark.unit
    def test_reserve_ignores_foreign_ids(self, existing):
        ids = IdGenerator(token="p")
        ids.reserve(existing)
        assert ids.next_id("row") == "row_p1"

    @pytest.mark.unit
    def test_reserve_never_moves_backwards(self):
        ids = IdGenerator(token="p")
        for _ in range(5):
            ids.next_id("row")
        ids.reserve(["row_p2"])
        assert ids.next_id("row") == "row_p6"

    @pytest.mark.unit
    def test_reserve_escapes_token(self):
        ids = IdGenerator(token="a.b")
        ids.reserve(["row_axb9", "row_a.b4"])
        assert ids.next_id("row") == "row_a.b5"


class TestGlobalGenerator:
    """Tests for the process-wide generator."""

    @pytest.mark.unit
    def test_singleton(self):
        reset_id_generator()
        assert get_id_generator() is get_id_generator()

    @pytest.mark.unit
    def test_token_from_environment(self, monkeypatch):
        monkeypatch.setenv("FORMCANVAS_ID_PREFIX", "env")
        reset_id_generator()
        try:
            assert get_id_generator().next_id("form") == "form_env1"
        finally:
            reset_id_generator()
