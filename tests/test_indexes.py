import pytest
from pymongo.errors import DuplicateKeyError

from app.db.indexes import create_indexes, index_plan, missing_indexes
from app.models.registry import get_table


def test_course_plan_has_sparse_codes_and_lookups():
    names = {options["name"]: options for _, options in index_plan(get_table("Course"))}

    assert names["course_code_unique"]["sparse"] is True
    assert "user_id_idx" in names
    assert "created_at_idx" in names


async def test_create_indexes_leaves_nothing_missing(mock_db):
    await create_indexes()
    await create_indexes()

    assert await missing_indexes() == {}


async def test_unique_email_enforced_after_indexing(mock_db):
    await create_indexes()
    await mock_db.users.insert_one({"email": "asha@example.com"})

    with pytest.raises(DuplicateKeyError):
        await mock_db.users.insert_one({"email": "asha@example.com"})
