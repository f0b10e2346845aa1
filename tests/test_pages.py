"""Page tests — sign-in gate, dashboard tabs, form submission, delete confirmation."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timedelta, timezone

from sqlalchemy import func, select

from leave_portal.common.constants import LeaveStatus
from leave_portal.leave.models import LeaveRequest
from tests.conftest import TestSessionFactory, seed_leave_request

FORM = {
    "employee_name": "Alice Smith",
    "staff_id": "DHL001",
    "leave_type": "Sick",
    "start_date": "25-05-2025",
    "end_date": "26-05-2025",
}


async def _count() -> int:
    async with TestSessionFactory() as session:
        result = await session.execute(select(func.count()).select_from(LeaveRequest))
        return result.scalar_one()


# ── Session gate ────────────────────────────────────────────────────


async def test_index_shows_sign_in_when_signed_out(client):
    resp = await client.get("/")
    assert resp.status_code == 200
    assert "Sign in with Google" in resp.text
    assert 'href="/auth/login"' in resp.text


async def test_index_redirects_signed_in_users(signed_in_client):
    resp = await signed_in_client.get("/")
    assert resp.status_code == 303
    assert resp.headers["location"] == "/dashboard"


async def test_dashboard_redirects_signed_out_users(client):
    for method, path in [
        ("GET", "/dashboard"),
        ("POST", "/dashboard/requests"),
        ("GET", f"/dashboard/requests/{uuid.uuid4()}/delete"),
        ("POST", f"/dashboard/requests/{uuid.uuid4()}/delete"),
    ]:
        resp = await client.request(method, path)
        assert resp.status_code == 303, path
        assert resp.headers["location"] == "/"


async def test_revoked_cookie_is_treated_as_signed_out(signed_in_client):
    await signed_in_client.post("/auth/signout")
    resp = await signed_in_client.get("/dashboard")
    assert resp.status_code == 303
    assert resp.headers["location"] == "/"


# ── Dashboard list tab ──────────────────────────────────────────────


async def test_dashboard_lists_requests(signed_in_client, db, test_user):
    await seed_leave_request(db, employee_name="Alice Smith", staff_id="DHL001")

    resp = await signed_in_client.get("/dashboard")
    assert resp.status_code == 200
    assert "Alice Smith" in resp.text
    assert "25/05/2025" in resp.text
    assert "30/05/2025" in resp.text
    assert test_user["display_name"] in resp.text
    assert 'action="/auth/signout"' in resp.text


async def test_dashboard_filters_from_query(signed_in_client, db):
    now = datetime.now(timezone.utc)
    await seed_leave_request(db, employee_name="Alice Smith", staff_id="A", created_at=now)
    await seed_leave_request(
        db, employee_name="Bob Jones", staff_id="B",
        start_date=date(2025, 7, 1), end_date=date(2025, 7, 3),
        created_at=now - timedelta(minutes=1),
    )

    resp = await signed_in_client.get("/dashboard", params={"tab": "list", "search": "bob"})
    assert "Bob Jones" in resp.text
    assert "Alice Smith" not in resp.text
    assert "Clear filters" in resp.text


async def test_dashboard_filter_with_no_match(signed_in_client, db):
    await seed_leave_request(db)
    resp = await signed_in_client.get(
        "/dashboard", params={"start_date": "2026-01-01"},
    )
    assert "No leave requests found matching your filters." in resp.text


async def test_dashboard_ignores_malformed_filter_dates(signed_in_client, db):
    await seed_leave_request(db, employee_name="Alice Smith")
    resp = await signed_in_client.get("/dashboard", params={"start_date": "yesterday"})
    assert resp.status_code == 200
    assert "Alice Smith" in resp.text


async def test_dashboard_notice_toast(signed_in_client):
    resp = await signed_in_client.get("/dashboard", params={"notice": "deleted"})
    assert "Leave request deleted successfully." in resp.text


# ── New request tab ─────────────────────────────────────────────────


async def test_new_tab_shows_form(signed_in_client):
    resp = await signed_in_client.get("/dashboard", params={"tab": "new"})
    assert resp.status_code == 200
    assert 'action="/dashboard/requests"' in resp.text
    assert 'placeholder="DD-MM-YYYY"' in resp.text


async def test_submit_form_redirects_to_list(signed_in_client):
    resp = await signed_in_client.post("/dashboard/requests", data=FORM)
    assert resp.status_code == 303
    assert resp.headers["location"] == "/dashboard?tab=list&notice=submitted"
    assert await _count() == 1

    page = await signed_in_client.get(resp.headers["location"])
    assert "Leave request submitted" in page.text
    assert "Sick" in page.text


async def test_submit_form_missing_fields_rerenders_with_errors(signed_in_client):
    resp = await signed_in_client.post(
        "/dashboard/requests", data={**FORM, "employee_name": "", "staff_id": ""},
    )
    assert resp.status_code == 422
    assert "Employee name is required" in resp.text
    assert "Staff ID is required" in resp.text
    # Typed values survive the round trip
    assert 'value="25-05-2025"' in resp.text
    assert await _count() == 0


async def test_submit_form_bad_range_shows_message(signed_in_client):
    resp = await signed_in_client.post(
        "/dashboard/requests", data={**FORM, "start_date": "27-05-2025"},
    )
    assert resp.status_code == 422
    assert "End date cannot be before start date." in resp.text


async def test_submit_form_duplicate_shows_toast(signed_in_client, db):
    await seed_leave_request(
        db, staff_id="DHL001", start_date=date(2025, 5, 25), end_date=date(2025, 5, 26),
    )
    resp = await signed_in_client.post("/dashboard/requests", data=FORM)
    assert resp.status_code == 409
    assert (
        "A leave request with the same Staff ID, Start Date, and End Date already exists."
        in resp.text
    )
    assert await _count() == 1


# ── Delete confirmation ─────────────────────────────────────────────


async def test_delete_confirmation_page(signed_in_client, db):
    seeded = await seed_leave_request(db, employee_name="Alice Smith", staff_id="DHL001")
    resp = await signed_in_client.get(f"/dashboard/requests/{seeded['id']}/delete")
    assert resp.status_code == 200
    assert "Alice Smith" in resp.text
    assert "DHL001" in resp.text
    assert "25/05/2025" in resp.text
    assert "Annual" in resp.text
    assert "This action cannot be undone." in resp.text
    assert 'href="/dashboard?tab=list"' in resp.text


async def test_cancel_leaves_request_in_place(signed_in_client, db):
    seeded = await seed_leave_request(db)
    await signed_in_client.get(f"/dashboard/requests/{seeded['id']}/delete")
    resp = await signed_in_client.get("/dashboard?tab=list")
    assert resp.status_code == 200
    assert await _count() == 1


async def test_confirm_deletes_and_redirects(signed_in_client, db):
    seeded = await seed_leave_request(db)
    resp = await signed_in_client.post(f"/dashboard/requests/{seeded['id']}/delete")
    assert resp.status_code == 303
    assert resp.headers["location"] == "/dashboard?tab=list&notice=deleted"
    assert await _count() == 0


async def test_delete_unknown_request_redirects_with_error(signed_in_client):
    resp = await signed_in_client.post(f"/dashboard/requests/{uuid.uuid4()}/delete")
    assert resp.status_code == 303
    assert resp.headers["location"] == "/dashboard?tab=list&notice=delete_failed"

    resp = await signed_in_client.get(f"/dashboard/requests/{uuid.uuid4()}/delete")
    assert resp.headers["location"] == "/dashboard?tab=list&notice=delete_failed"


async def test_new_tab_offers_status_and_reset(signed_in_client):
    resp = await signed_in_client.get("/dashboard", params={"tab": "new"})
    assert '<select name="status">' in resp.text
    for status in ("Pending", "Approved", "Rejected"):
        assert f'value="{status}"' in resp.text
    assert 'href="/dashboard?tab=new"' in resp.text
    assert ">Reset</a>" in resp.text


async def test_submit_form_stores_chosen_status(signed_in_client):
    resp = await signed_in_client.post("/dashboard/requests", data={**FORM, "status": "Approved"})
    assert resp.status_code == 303

    async with TestSessionFactory() as session:
        stored = (await session.execute(select(LeaveRequest))).scalars().one()
    assert stored.status == LeaveStatus.approved


async def test_submit_form_without_status_defaults_to_pending(signed_in_client):
    resp = await signed_in_client.post("/dashboard/requests", data=FORM)
    assert resp.status_code == 303

    async with TestSessionFactory() as session:
        stored = (await session.execute(select(LeaveRequest))).scalars().one()
    assert stored.status == LeaveStatus.pending


async def test_submit_form_unknown_status_rerenders_with_error(signed_in_client):
    resp = await signed_in_client.post("/dashboard/requests", data={**FORM, "status": "Maybe"})
    assert resp.status_code == 422
    assert await _count() == 0


async def test_filter_inputs_submit_on_change(signed_in_client):
    resp = await signed_in_client.get("/dashboard")
    assert resp.text.count('onchange="this.form.submit()"') == 3
