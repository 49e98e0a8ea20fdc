import importlib.util
import io
from pathlib import Path

import pytest
from alembic.migration import MigrationContext
from alembic.operations import Operations

VERSIONS = Path(__file__).resolve().parent.parent / "backend" / "migrations" / "versions"


def _load(name):
    spec = importlib.util.spec_from_file_location(name, VERSIONS / f"{name}.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def _upgrade_sql(dialect_name, name):
    buf = io.StringIO()
    ctx = MigrationContext.configure(
        dialect_name=dialect_name,
        opts={"as_sql": True, "output_buffer": buf},
    )
    with Operations.context(ctx):
        _load(name).upgrade()
    return buf.getvalue()


def test_category_name_index_is_a_mysql_functional_key_part():
    sql = _upgrade_sql("mysql", "0002_categories_permissions")
    assert "CREATE UNIQUE INDEX uq_categories_name_lower ON categories ((lower(name)))" in sql


@pytest.mark.parametrize("dialect_name", ["sqlite", "postgresql"])
def test_category_name_index_renders_elsewhere(dialect_name):
    sql = _upgrade_sql(dialect_name, "0002_categories_permissions")
    assert "uq_categories_name_lower" in sql
    assert "lower(name)" in sql
