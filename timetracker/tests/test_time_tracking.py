"""
Tests for time entries: manual entries, the live timer, listing and deletion.
"""
from datetime import datetime, timedelta, timezone
from uuid import uuid4

from timetracker.database.models import TimeEntry
from .test_base import BaseAPITest, PayloadFactory

JAN_15 = datetime(2024, 1, 15, 9, 0, tzinfo=timezone.utc)
REQUIRED = "Project, description, and start time are required"


class TestCreateTimeEntry(BaseAPITest):
    """Test manual entries and the validation shared with timer starts."""

    def test_manual_entry(self, client, auth_headers, member_project, regular_user):
        payload = PayloadFactory.time_entry(member_project.id)
        response = client.post("/api/time-entries", json=payload, headers=auth_headers)

        self.assert_success_response(response)
        entry = response.json()["timeEntry"]
        assert entry["userId"] == str(regular_user.id)
        assert entry["projectId"] == str(member_project.id)
        assert entry["description"] == "Working on test features"
        assert entry["startTime"] == "2024-01-15T09:00:00Z"
        assert entry["endTime"] == "2024-01-15T10:30:00Z"
        assert entry["duration"] == 90
        assert entry["isActive"] is False
        assert entry["project"] == {"id": str(member_project.id), "name": "Website"}
        assert entry["user"]["email"] == "test@example.com"

    def test_duration_rounds_half_up(self, client, auth_headers, member_project):
        payload = PayloadFactory.time_entry(
            member_project.id, startTime="2024-01-15T09:00:00Z", endTime="2024-01-15T09:10:30Z"
        )
        response = client.post("/api/time-entries", json=payload, headers=auth_headers)
        assert response.json()["timeEntry"]["duration"] == 11

    def test_offset_timestamps_normalized_to_utc(self, client, auth_headers, member_project):
        payload = PayloadFactory.time_entry(
            member_project.id, startTime="2024-01-15T11:00:00+02:00", endTime="2024-01-15T11:45:00+02:00"
        )
        response = client.post("/api/time-entries", json=payload, headers=auth_headers)
        entry = response.json()["timeEntry"]
        assert entry["startTime"] == "2024-01-15T09:00:00Z"
        assert entry["duration"] == 45

    def test_zero_length_entry(self, client, auth_headers, member_project):
        payload = PayloadFactory.time_entry(member_project.id, endTime="2024-01-15T09:00:00Z")
        response = client.post("/api/time-entries", json=payload, headers=auth_headers)
        self.assert_success_response(response)
        assert response.json()["timeEntry"]["duration"] == 0

    def test_missing_fields(self, client, auth_headers, member_project, db_session):
        for missing in ("projectId", "description", "startTime"):
            payload = PayloadFactory.time_entry(member_project.id)
            del payload[missing]
            response = client.post("/api/time-entries", json=payload, headers=auth_headers)
            self.assert_bad_request(response, REQUIRED)
        assert db_session.query(TimeEntry).count() == 0

    def test_blank_fields_count_as_missing(self, client, auth_headers, member_project, db_session):
        for blank in ("projectId", "startTime"):
            payload = PayloadFactory.time_entry(member_project.id, **{blank: ""})
            response = client.post("/api/time-entries", json=payload, headers=auth_headers)
            self.assert_bad_request(response, REQUIRED)
        assert db_session.query(TimeEntry).count() == 0

    def test_blank_end_time_starts_open_entry(self, client, auth_headers, member_project):
        payload = PayloadFactory.timer_start(member_project.id, endTime="")
        response = client.post("/api/time-entries", json=payload, headers=auth_headers)
        self.assert_success_response(response)
        assert response.json()["timeEntry"]["isActive"] is True

    def test_blank_description(self, client, auth_headers, member_project):
        payload = PayloadFactory.time_entry(member_project.id, description="  ")
        self.assert_bad_request(client.post("/api/time-entries", json=payload, headers=auth_headers), REQUIRED)

    def test_end_before_start(self, client, auth_headers, member_project, db_session):
        payload = PayloadFactory.time_entry(member_project.id, endTime="2024-01-15T08:00:00Z")
        response = client.post("/api/time-entries", json=payload, headers=auth_headers)
        self.assert_bad_request(response, "End time cannot be before start time")
        assert db_session.query(TimeEntry).count() == 0

    def test_non_member_forbidden(self, client, auth_headers, foreign_project, db_session):
        payload = PayloadFactory.time_entry(foreign_project.id)
        response = client.post("/api/time-entries", json=payload, headers=auth_headers)
        self.assert_forbidden(response, "Access denied to this project")
        assert db_session.query(TimeEntry).count() == 0

    def test_unknown_project_is_forbidden_for_user(self, client, auth_headers):
        payload = PayloadFactory.time_entry(uuid4())
        self.assert_forbidden(client.post("/api/time-entries", json=payload, headers=auth_headers))

    def test_admin_logs_time_on_any_project(self, client, admin_headers, admin_user, foreign_project):
        payload = PayloadFactory.time_entry(foreign_project.id)
        response = client.post("/api/time-entries", json=payload, headers=admin_headers)
        self.assert_success_response(response)
        assert response.json()["timeEntry"]["userId"] == str(admin_user.id)

    def test_admin_unknown_project(self, client, admin_headers):
        payload = PayloadFactory.time_entry(uuid4())
        response = client.post("/api/time-entries", json=payload, headers=admin_headers)
        self.assert_not_found(response, "Project not found")

    def test_requires_auth(self, client, member_project):
        self.assert_unauthorized(client.post("/api/time-entries", json=PayloadFactory.time_entry(member_project.id)))


class TestLiveTimer(BaseAPITest):
    """Test the start/stop lifecycle of the live timer."""

    def test_start_and_stop(self, client, auth_headers, member_project):
        started = client.post("/api/time-entries", json=PayloadFactory.timer_start(member_project.id),
                              headers=auth_headers)
        self.assert_success_response(started)
        entry = started.json()["timeEntry"]
        assert entry["isActive"] is True
        assert entry["endTime"] is None
        assert entry["duration"] is None

        stopped = client.put(f"/api/time-entries/{entry['id']}", json={"endTime": "2024-01-15T09:42:00Z"},
                             headers=auth_headers)
        self.assert_success_response(stopped)
        entry = stopped.json()["timeEntry"]
        assert entry["isActive"] is False
        assert entry["endTime"] == "2024-01-15T09:42:00Z"
        assert entry["duration"] == 42
        assert entry["updatedAt"] is not None

    def test_stop_defaults_to_now(self, client, auth_headers, member_project):
        start = datetime.now(timezone.utc) - timedelta(minutes=20)
        payload = PayloadFactory.timer_start(member_project.id, startTime=start.isoformat())
        entry_id = client.post("/api/time-entries", json=payload, headers=auth_headers).json()["timeEntry"]["id"]

        response = client.put(f"/api/time-entries/{entry_id}", headers=auth_headers)
        self.assert_success_response(response)
        assert response.json()["timeEntry"]["duration"] in (20, 21)

    def test_running_timer_lookup(self, client, auth_headers, member_project):
        empty = client.get("/api/time-entries/active", headers=auth_headers)
        self.assert_success_response(empty)
        assert empty.json() == {"timeEntry": None}

        entry_id = client.post("/api/time-entries", json=PayloadFactory.timer_start(member_project.id),
                               headers=auth_headers).json()["timeEntry"]["id"]
        running = client.get("/api/time-entries/active", headers=auth_headers)
        assert running.json()["timeEntry"]["id"] == entry_id

    def test_second_timer_conflicts(self, client, auth_headers, member_project, db_session):
        client.post("/api/time-entries", json=PayloadFactory.timer_start(member_project.id), headers=auth_headers)
        response = client.post("/api/time-entries", json=PayloadFactory.timer_start(member_project.id),
                               headers=auth_headers)
        self.assert_conflict(response, "already have a running timer")
        assert db_session.query(TimeEntry).count() == 1

    def test_manual_entry_allowed_while_timer_runs(self, client, auth_headers, member_project):
        client.post("/api/time-entries", json=PayloadFactory.timer_start(member_project.id), headers=auth_headers)
        response = client.post("/api/time-entries", json=PayloadFactory.time_entry(member_project.id),
                               headers=auth_headers)
        self.assert_success_response(response)

    def test_other_users_timer_does_not_conflict(self, client, auth_headers, admin_headers, member_project):
        client.post("/api/time-entries", json=PayloadFactory.timer_start(member_project.id), headers=auth_headers)
        response = client.post("/api/time-entries", json=PayloadFactory.timer_start(member_project.id),
                               headers=admin_headers)
        self.assert_success_response(response)

    def test_stop_twice_conflicts(self, client, auth_headers, member_project):
        entry_id = client.post("/api/time-entries", json=PayloadFactory.timer_start(member_project.id),
                               headers=auth_headers).json()["timeEntry"]["id"]
        client.put(f"/api/time-entries/{entry_id}", json={"endTime": "2024-01-15T10:00:00Z"}, headers=auth_headers)

        response = client.put(f"/api/time-entries/{entry_id}", json={"endTime": "2024-01-15T11:00:00Z"},
                              headers=auth_headers)
        self.assert_conflict(response, "already stopped")

    def test_stop_before_start(self, client, auth_headers, member_project):
        entry_id = client.post("/api/time-entries", json=PayloadFactory.timer_start(member_project.id),
                               headers=auth_headers).json()["timeEntry"]["id"]
        response = client.put(f"/api/time-entries/{entry_id}", json={"endTime": "2024-01-15T08:59:00Z"},
                              headers=auth_headers)
        self.assert_bad_request(response, "End time cannot be before start time")

    def test_stop_someone_elses_timer(self, client, auth_headers, other_headers, member_project):
        entry_id = client.post("/api/time-entries", json=PayloadFactory.timer_start(member_project.id),
                               headers=auth_headers).json()["timeEntry"]["id"]
        response = client.put(f"/api/time-entries/{entry_id}", json={}, headers=other_headers)
        self.assert_forbidden(response, "Access denied to this time entry")

    def test_admin_stops_any_timer(self, client, auth_headers, admin_headers, member_project):
        entry_id = client.post("/api/time-entries", json=PayloadFactory.timer_start(member_project.id),
                               headers=auth_headers).json()["timeEntry"]["id"]
        response = client.put(f"/api/time-entries/{entry_id}", json={"endTime": "2024-01-15T09:30:00Z"},
                              headers=admin_headers)
        self.assert_success_response(response)
        assert response.json()["timeEntry"]["duration"] == 30

    def test_stop_unknown_entry(self, client, auth_headers):
        response = client.put(f"/api/time-entries/{uuid4()}", json={}, headers=auth_headers)
        self.assert_not_found(response, "Time entry not found")


class TestListTimeEntries(BaseAPITest):
    """Test role-scoped listing and its filters."""

    def test_user_sees_only_own_entries(self, client, auth_headers, regular_user, other_user,
                                        member_project, foreign_project, make_entry):
        own = make_entry(regular_user, member_project, JAN_15, 30)
        make_entry(other_user, foreign_project, JAN_15, 30)

        response = client.get("/api/time-entries", headers=auth_headers)
        self.assert_success_response(response)
        assert [e["id"] for e in response.json()["timeEntries"]] == [str(own.id)]

    def test_user_id_filter_ignored_for_users(self, client, auth_headers, regular_user, other_user,
                                              member_project, foreign_project, make_entry):
        own = make_entry(regular_user, member_project, JAN_15, 30)
        make_entry(other_user, foreign_project, JAN_15, 30)

        response = client.get("/api/time-entries", params={"userId": str(other_user.id)}, headers=auth_headers)
        assert [e["id"] for e in response.json()["timeEntries"]] == [str(own.id)]

    def test_malformed_user_id_ignored_for_users(self, client, auth_headers, regular_user, member_project,
                                                 make_entry):
        own = make_entry(regular_user, member_project, JAN_15, 30)

        response = client.get("/api/time-entries", params={"userId": "someone"}, headers=auth_headers)
        self.assert_success_response(response)
        assert [e["id"] for e in response.json()["timeEntries"]] == [str(own.id)]

    def test_malformed_user_id_rejected_for_admins(self, client, admin_headers):
        response = client.get("/api/time-entries", params={"userId": "someone"}, headers=admin_headers)
        self.assert_bad_request(response, "Invalid userId")

    def test_admin_sees_everyone(self, client, admin_headers, regular_user, other_user,
                                 member_project, foreign_project, make_entry):
        make_entry(regular_user, member_project, JAN_15, 30)
        make_entry(other_user, foreign_project, JAN_15, 30)

        response = client.get("/api/time-entries", headers=admin_headers)
        assert len(response.json()["timeEntries"]) == 2

    def test_admin_user_filter(self, client, admin_headers, regular_user, other_user,
                               member_project, foreign_project, make_entry):
        make_entry(regular_user, member_project, JAN_15, 30)
        theirs = make_entry(other_user, foreign_project, JAN_15, 30)

        response = client.get("/api/time-entries", params={"userId": str(other_user.id)}, headers=admin_headers)
        assert [e["id"] for e in response.json()["timeEntries"]] == [str(theirs.id)]

    def test_project_filter(self, client, admin_headers, regular_user, other_user,
                            member_project, foreign_project, make_entry):
        make_entry(regular_user, member_project, JAN_15, 30)
        theirs = make_entry(other_user, foreign_project, JAN_15, 30)

        response = client.get("/api/time-entries", params={"projectId": str(foreign_project.id)},
                              headers=admin_headers)
        assert [e["projectId"] for e in response.json()["timeEntries"]] == [str(theirs.project_id)]

    def test_newest_first(self, client, auth_headers, regular_user, member_project, make_entry):
        middle = make_entry(regular_user, member_project, JAN_15, 10)
        oldest = make_entry(regular_user, member_project, JAN_15 - timedelta(days=1), 10)
        newest = make_entry(regular_user, member_project, JAN_15 + timedelta(days=1))

        response = client.get("/api/time-entries", headers=auth_headers)
        assert [e["id"] for e in response.json()["timeEntries"]] == [
            str(newest.id), str(middle.id), str(oldest.id)
        ]

    def test_date_range_is_inclusive(self, client, auth_headers, regular_user, member_project, make_entry):
        make_entry(regular_user, member_project, datetime(2024, 1, 9, 23, 59, tzinfo=timezone.utc), 5)
        first = make_entry(regular_user, member_project, datetime(2024, 1, 10, 0, 0, tzinfo=timezone.utc), 5)
        last = make_entry(regular_user, member_project, datetime(2024, 1, 12, 23, 30, tzinfo=timezone.utc), 5)
        make_entry(regular_user, member_project, datetime(2024, 1, 13, 0, 0, tzinfo=timezone.utc), 5)

        response = client.get("/api/time-entries", params={"startDate": "2024-01-10", "endDate": "2024-01-12"},
                              headers=auth_headers)
        assert [e["id"] for e in response.json()["timeEntries"]] == [str(last.id), str(first.id)]

    def test_timestamp_bounds(self, client, auth_headers, regular_user, member_project, make_entry):
        make_entry(regular_user, member_project, JAN_15, 5)
        later = make_entry(regular_user, member_project, JAN_15 + timedelta(hours=3), 5)

        response = client.get("/api/time-entries", params={"startDate": "2024-01-15T10:00:00Z"},
                              headers=auth_headers)
        assert [e["id"] for e in response.json()["timeEntries"]] == [str(later.id)]

    def test_bad_date(self, client, auth_headers):
        response = client.get("/api/time-entries", params={"startDate": "15/01/2024"}, headers=auth_headers)
        self.assert_bad_request(response, "Invalid startDate format")

    def test_requires_auth(self, client):
        self.assert_unauthorized(client.get("/api/time-entries"))


class TestSingleTimeEntry(BaseAPITest):
    """Test fetching and deleting a single entry."""

    def test_owner_fetches_entry(self, client, auth_headers, regular_user, member_project, make_entry):
        entry = make_entry(regular_user, member_project, JAN_15, 15)
        response = client.get(f"/api/time-entries/{entry.id}", headers=auth_headers)
        self.assert_success_response(response)
        assert response.json()["timeEntry"]["duration"] == 15

    def test_other_user_cannot_fetch(self, client, other_headers, regular_user, member_project, make_entry):
        entry = make_entry(regular_user, member_project, JAN_15, 15)
        self.assert_forbidden(client.get(f"/api/time-entries/{entry.id}", headers=other_headers))

    def test_owner_deletes_entry(self, client, auth_headers, regular_user, member_project, make_entry, db_session):
        entry = make_entry(regular_user, member_project, JAN_15, 15)
        entry_id = entry.id

        response = client.delete(f"/api/time-entries/{entry_id}", headers=auth_headers)
        self.assert_success_response(response)
        assert response.json() == {"message": "Time entry deleted"}
        assert db_session.query(TimeEntry).filter(TimeEntry.id == entry_id).first() is None

    def test_other_user_cannot_delete(self, client, other_headers, regular_user, member_project,
                                      make_entry, db_session):
        entry = make_entry(regular_user, member_project, JAN_15, 15)
        response = client.delete(f"/api/time-entries/{entry.id}", headers=other_headers)
        self.assert_forbidden(response, "Access denied to this time entry")
        assert db_session.query(TimeEntry).count() == 1

    def test_admin_deletes_any_entry(self, client, admin_headers, regular_user, member_project,
                                     make_entry, db_session):
        entry = make_entry(regular_user, member_project, JAN_15, 15)
        self.assert_success_response(client.delete(f"/api/time-entries/{entry.id}", headers=admin_headers))
        assert db_session.query(TimeEntry).count() == 0

    def test_delete_unknown_entry(self, client, auth_headers):
        response = client.delete(f"/api/time-entries/{uuid4()}", headers=auth_headers)
        self.assert_not_found(response, "Time entry not found")

    def test_malformed_entry_id(self, client, auth_headers):
        response = client.get("/api/time-entries/not-a-uuid", headers=auth_headers)
        self.assert_bad_request(response, "entry_id")

    def test_deleted_timer_frees_the_slot(self, client, auth_headers, member_project):
        entry_id = client.post("/api/time-entries", json=PayloadFactory.timer_start(member_project.id),
                               headers=auth_headers).json()["timeEntry"]["id"]
        client.delete(f"/api/time-entries/{entry_id}", headers=auth_headers)

        response = client.post("/api/time-entries", json=PayloadFactory.timer_start(member_project.id),
                               headers=auth_headers)
        self.assert_success_response(response)
