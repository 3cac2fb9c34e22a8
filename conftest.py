"""Root pytest configuration and fixtures.

This module provides:
- Deterministic id generators
- Sample schema trees shared by the per-package test modules
"""

from __future__ import annotations

import pytest

from formcanvas.ids import IdGenerator, reset_id_generator
from formcanvas.schema import Column, FieldType, FormField, FormSchema, Row, Section


# =============================================================================
# Autouse Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def _fresh_global_ids():
    """Keep the process-wide id generator from leaking between tests."""
    reset_id_generator()
    yield
    reset_id_generator()


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch):
    """Ignore FORMCANVAS_* settings from the developer shell."""
    for name in (
        "FORMCANVAS_STORAGE_DIR",
        "FORMCANVAS_STORAGE_KEY",
        "FORMCANVAS_ID_PREFIX",
        "FORMCANVAS_DEFAULT_COLUMNS",
        "FORMCANVAS_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


# =============================================================================
# Common Test Fixtures
# =============================================================================


@pytest.fixture
def ids() -> IdGenerator:
    """Id generator with a fixed token, producing e.g. 'row_t1'."""
    return IdGenerator(token="t")


@pytest.fixture
def sample_schema() -> FormSchema:
    """A three-section form.

    Returns:
        form_1
        ├── section_a "Contact"
        │   ├── row_a1: column_a1 [field_a, field_b] | column_a2 [field_c]
        │   └── row_a2: column_a3 [field_d]
        ├── section_b "Preferences"
        │   └── row_b1: column_b1 [field_e]
        └── section_c "Empty" (no rows)
    """
    return FormSchema(
        id="form_1",
        name="Intake",
        description="Patient intake form",
        sections=(
            Section(
                id="section_a",
                title="Contact",
                rows=(
                    Row(
                        id="row_a1",
                        columns=(
                            Column(
                                id="column_a1",
                                span=2,
                                fields=(
                                    FormField(
                                        id="field_a",
                                        type=FieldType.TEXT,
                                        name="first_name",
                                        label="First name",
                                    ),
                                    FormField(
                                        id="field_b",
                                        type=FieldType.TEXT,
                                        name="last_name",
                                    ),
                                ),
                            ),
                            Column(
                                id="column_a2",
                                span=2,
                                fields=(
                                    FormField(
                                        id="field_c", type=FieldType.DATE, name="dob"
                                    ),
                                ),
                            ),
                        ),
                    ),
                    Row(
                        id="row_a2",
                        columns=(
                            Column(
                                id="column_a3",
                                fields=(
                                    FormField(
                                        id="field_d",
                                        type=FieldType.TEXTAREA,
                                        name="notes",
                                    ),
                                ),
                            ),
                        ),
                    ),
                ),
            ),
            Section(
                id="section_b",
                title="Preferences",
                rows=(
                    Row(
                        id="row_b1",
                        columns=(
                            Column(
                                id="column_b1",
                                fields=(
                                    FormField(
                                        id="field_e",
                                        type=FieldType.CHECKBOX,
                                        name="subscribe",
                                    ),
                                ),
                            ),
                        ),
                    ),
                ),
            ),
            Section(id="section_c", title="Empty"),
        ),
    )


@pytest.fixture
def two_section_schema() -> FormSchema:
    """Two sections, each with one row holding one empty column."""
    return FormSchema(
        id="form_2",
        name="Two sections",
        sections=(
            Section(
                id="section_1",
                title="First",
                rows=(Row(id="row_1", columns=(Column(id="column_1"),)),),
            ),
            Section(
                id="section_2",
                title="Second",
                rows=(Row(id="row_2", columns=(Column(id="column_2"),)),),
            ),
        ),
    )
