"""
Locust Load Test Suite

Run scenarios:
  locust -f locustfile.py --tags concurrency  # Race for a limited event
  locust -f locustfile.py --tags throughput   # Test cache
  locust -f locustfile.py --tags edge         # Test bad input
  locust -f locustfile.py --tags admin        # Bulk status changes
  locust -f locustfile.py                     # All tests

Admin credentials come from LOAD_ADMIN_EMAIL / LOAD_ADMIN_PASSWORD and must
match the server's ADMIN_EMAIL / ADMIN_PASSWORD.
"""

import os
import random
from locust import HttpUser, task, between, tag, events
from datetime import datetime, timezone, timedelta

ADMIN_EMAIL = os.environ.get("LOAD_ADMIN_EMAIL", "admin@campus.local")
ADMIN_PASSWORD = os.environ.get("LOAD_ADMIN_PASSWORD", "change-me-admin")
CONCURRENCY_LIMIT = 10

# Shared state
EVENT_IDS = []
APPLICATION_IDS = []
CONCURRENCY_EVENT_ID = None


def register_student(client) -> dict:
    """Register a throwaway student and return auth headers ({} on failure)."""
    n = random.randint(10_000_000, 99_999_999)
    email = f"load_{n}@test.com"
    client.post("/api/v1/auth/register", json={
        "name": f"Load Student {n}",
        "student_id": f"L{n}",
        "email": email,
        "gender": random.choice(["Male", "Female", "Other"]),
        "phone_no": f"9{n:09d}"[:10],
        "course": "Load Testing",
        "password": "loadtest123",
    })
    resp = client.post("/api/v1/auth/login", json={"email": email, "password": "loadtest123"})
    if resp.status_code != 200:
        return {}
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


def admin_headers(client) -> dict:
    resp = client.post("/api/v1/admin/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    if resp.status_code != 200:
        return {}
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


def event_payload(name: str, participant_limit=None, price: float = 0) -> dict:
    start = datetime.now(timezone.utc) + timedelta(days=random.randint(1, 90))
    return {
        "name": name,
        "description": "Load test event",
        "location": "Venue",
        "start_date": start.isoformat(),
        "end_date": (start + timedelta(hours=2)).isoformat(),
        "price": price,
        "participant_limit": participant_limit,
    }


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    print("\n" + "=" * 60)
    print(f"SETUP: concurrency scenario uses an event limited to {CONCURRENCY_LIMIT}")
    print("=" * 60)


class ConcurrencyUser(HttpUser):
    """
    TEST 1: Concurrency - 100 students -> 10 places

    Run: locust -f locustfile.py --tags concurrency -u 100 -r 50 --run-time 30s

    After test, verify:
      SELECT current_applications, participant_limit FROM events WHERE id = X;
      SELECT COUNT(*) FROM applications WHERE event_id = X;
    Both counts must match and be <= 10
    """
    wait_time = between(0, 0.1)

    def on_start(self):
        self.headers = register_student(self.client)

        if not CONCURRENCY_EVENT_ID:
            resp = self.client.post(
                "/api/v1/events/",
                json=event_payload("Concurrency Test Event", participant_limit=CONCURRENCY_LIMIT),
                headers=admin_headers(self.client),
            )
            if resp.status_code == 201:
                globals()["CONCURRENCY_EVENT_ID"] = resp.json()["id"]
                print(f"\n✓ Created event {CONCURRENCY_EVENT_ID} with {CONCURRENCY_LIMIT} places\n")

    @tag("concurrency")
    @task
    def apply_limited_event(self):
        """All students fight for the same places."""
        if not CONCURRENCY_EVENT_ID or not self.headers:
            return

        with self.client.post(
            f"/api/v1/events/{CONCURRENCY_EVENT_ID}/apply",
            json={"notes": "load"},
            headers=self.headers,
            name="/api/v1/events/{id}/apply [limited]",
            catch_response=True,
        ) as resp:
            if resp.status_code == 201:
                resp.success()
            elif resp.status_code == 409:
                resp.success()  # Expected: full or already applied
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class ThroughputUser(HttpUser):
    """
    TEST 2: Throughput - Cache effectiveness

    Run twice:
      1. With Redis: locust -f locustfile.py --tags throughput -u 100 -r 20 --run-time 60s
      2. Without Redis: REDIS_ENABLED=false on the server, run again
    """
    wait_time = between(0.1, 0.5)

    @tag("throughput", "read")
    @task(10)
    def list_events_cached(self):
        page = random.randint(1, 5)
        self.client.get(f"/api/v1/events/?page={page}&page_size=20",
            name="/api/v1/events/ [cached]")

    @tag("throughput", "read")
    @task(3)
    def get_event_detail(self):
        if EVENT_IDS:
            self.client.get(f"/api/v1/events/{random.choice(EVENT_IDS)}",
                name="/api/v1/events/{id}")

    @tag("throughput")
    @task(1)
    def health_check(self):
        self.client.get("/health")


class EdgeCaseUser(HttpUser):
    """
    TEST 3: Edge cases - Bad input handling

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s

    Every request must come back 4xx, never 5xx.
    """
    wait_time = between(0.5, 1.5)

    def on_start(self):
        self.headers = register_student(self.client)
        self.admin = admin_headers(self.client)

    def _expect(self, resp, allowed):
        if resp.status_code in allowed:
            resp.success()
        else:
            resp.failure(f"Expected {allowed}, got {resp.status_code}")

    @tag("edge")
    @task
    def apply_missing_event(self):
        with self.client.post("/api/v1/events/999999/apply",
            headers=self.headers, name="/api/v1/events/{id}/apply [missing]",
            catch_response=True) as resp:
            self._expect(resp, [404])

    @tag("edge")
    @task
    def apply_without_auth(self):
        with self.client.post("/api/v1/events/1/apply",
            name="/api/v1/events/{id}/apply [no auth]", catch_response=True) as resp:
            self._expect(resp, [401])

    @tag("edge")
    @task
    def malformed_apply_body(self):
        with self.client.post("/api/v1/events/1/apply", data="not json at all",
            headers={**self.headers, "Content-Type": "application/json"},
            name="/api/v1/events/{id}/apply [garbage]", catch_response=True) as resp:
            self._expect(resp, [400, 404, 422])

    @tag("edge")
    @task
    def bulk_unknown_action(self):
        with self.client.post("/api/v1/admin/applications/bulk-action",
            json={"application_ids": [1], "action": "delete"},
            headers=self.admin, catch_response=True) as resp:
            self._expect(resp, [400])

    @tag("edge")
    @task
    def bulk_empty_ids(self):
        with self.client.post("/api/v1/admin/applications/bulk-action",
            json={"application_ids": [], "action": "approve"},
            headers=self.admin, catch_response=True) as resp:
            self._expect(resp, [400])

    @tag("edge")
    @task
    def invalid_status_value(self):
        with self.client.patch("/api/v1/admin/applications/1/status",
            json={"status": "Archived"}, headers=self.admin,
            name="/api/v1/admin/applications/{id}/status [invalid]",
            catch_response=True) as resp:
            self._expect(resp, [400, 404])

    @tag("edge")
    @task
    def student_on_admin_route(self):
        with self.client.get("/api/v1/admin/applications/stats",
            headers=self.headers, name="/api/v1/admin/applications/stats [student]",
            catch_response=True) as resp:
            self._expect(resp, [403])


class AdminUser(HttpUser):
    """
    TEST 4: Admin bulk traffic

    Run: locust -f locustfile.py --tags admin -u 5 -r 1 --run-time 60s

    Mixed valid and missing ids: responses are 200 or 207, never 5xx.
    """
    wait_time = between(1, 2)

    def on_start(self):
        self.headers = admin_headers(self.client)

    @tag("admin")
    @task(3)
    def refresh_application_ids(self):
        resp = self.client.get("/api/v1/admin/applications", headers=self.headers)
        if resp.status_code == 200:
            APPLICATION_IDS[:] = [a["id"] for a in resp.json()][:500]

    @tag("admin")
    @task(2)
    def bulk_action(self):
        if not APPLICATION_IDS:
            return
        ids = random.sample(APPLICATION_IDS, min(len(APPLICATION_IDS), 20)) + [999999]
        with self.client.post("/api/v1/admin/applications/bulk-action",
            json={"application_ids": ids, "action": random.choice(["approve", "reject"])},
            headers=self.headers, catch_response=True) as resp:
            if resp.status_code in (200, 207):
                resp.success()
            else:
                resp.failure(f"Unexpected: {resp.status_code}")

    @tag("admin")
    @task(1)
    def stats(self):
        self.client.get("/api/v1/admin/applications/stats", headers=self.headers)


class RealisticUser(HttpUser):
    """
    TEST 5: Realistic mixed workload

    Run: locust -f locustfile.py -u 200 -r 20 --run-time 120s

    Simulates real traffic:
      - Mostly browsing
      - Some applications and "my applications" checks
      - Rare event creation by the administrator
    """
    wait_time = between(1, 3)

    def on_start(self):
        self.headers = register_student(self.client)

    @task(50)
    def browse_events(self):
        resp = self.client.get("/api/v1/events/?page=1&page_size=20")
        if resp.status_code == 200:
            for event in resp.json().get("events", []):
                if event["id"] not in EVENT_IDS:
                    EVENT_IDS.append(event["id"])

    @task(20)
    def view_event(self):
        if EVENT_IDS:
            self.client.get(f"/api/v1/events/{random.choice(EVENT_IDS)}",
                name="/api/v1/events/{id}")

    @task(10)
    def apply(self):
        if EVENT_IDS and self.headers:
            with self.client.post(f"/api/v1/events/{random.choice(EVENT_IDS)}/apply",
                headers=self.headers, name="/api/v1/events/{id}/apply",
                catch_response=True) as resp:
                if resp.status_code in (201, 409):
                    resp.success()
                else:
                    resp.failure(f"Unexpected: {resp.status_code}")

    @task(5)
    def my_applications(self):
        if self.headers:
            self.client.get("/api/v1/applications/me", headers=self.headers)

    @task(1)
    def create_event(self):
        resp = self.client.post(
            "/api/v1/events/",
            json=event_payload(f"Event {random.randint(1, 10000)}",
                participant_limit=random.choice([None, 20, 100]),
                price=random.choice([0, 0, 150])),
            headers=admin_headers(self.client),
        )
        if resp.status_code == 201:
            EVENT_IDS.append(resp.json()["id"])
