"""Tests for cursor pagination of users and invitations."""

import pytest

from src.gatehouse.core.exceptions import InvalidCursorError
from src.gatehouse.schemas.pagination import PageRequest
from tests.helpers import create_invitation, create_user

pytestmark = pytest.mark.integration


@pytest.fixture
async def users(db_session):
    """Five users, ids ascending with creation order."""
    created = [await create_user(db_session, email=f"user{i}@x.com") for i in range(5)]
    return [u.id for u in created]


class TestListUsers:
    async def test_first_page(self, registration_service, users):
        page = await registration_service.list_users(PageRequest(first=2))

        assert [u.id for u in page.items] == users[:2]
        assert page.has_next_page
        assert not page.has_previous_page

    async def test_walk_forward(self, registration_service, users):
        seen = []
        request = PageRequest(first=2)
        while True:
            page = await registration_service.list_users(request)
            seen.extend(u.id for u in page.items)
            if not page.has_next_page:
                break
            request = PageRequest(first=2, after=page.end_cursor)

        assert seen == users

    async def test_last_page_backwards(self, registration_service, users):
        page = await registration_service.list_users(PageRequest(last=2))

        # Backward pages are still returned in ascending order
        assert [u.id for u in page.items] == users[-2:]
        assert page.has_previous_page
        assert not page.has_next_page

    async def test_before_cursor(self, registration_service, users):
        last = await registration_service.list_users(PageRequest(last=2))
        page = await registration_service.list_users(
            PageRequest(last=2, before=last.start_cursor)
        )

        assert [u.id for u in page.items] == users[1:3]
        assert page.has_previous_page
        assert page.has_next_page

    async def test_empty(self, registration_service):
        page = await registration_service.list_users(PageRequest(first=10))

        assert page.items == []
        assert page.start_cursor is None
        assert page.end_cursor is None
        assert not page.has_next_page

    async def test_invalid_cursor(self, registration_service):
        with pytest.raises(InvalidCursorError):
            await registration_service.list_users(PageRequest(first=2, after="garbage!"))


async def test_list_invitations_after_cursor(registration_service, db_session):
    for i in range(3):
        await create_invitation(db_session, f"invitee{i}@x.com")

    first = await registration_service.list_invitations(PageRequest(first=1))
    rest = await registration_service.list_invitations(
        PageRequest(first=10, after=first.end_cursor)
    )

    assert [i.email for i in first.items] == ["invitee0@x.com"]
    assert [i.email for i in rest.items] == ["invitee1@x.com", "invitee2@x.com"]
    assert not rest.has_next_page
    assert rest.has_previous_page
