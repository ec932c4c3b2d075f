import random
from locust import HttpUser, task, between

# a few hot keys so concurrent users pile onto the same per-key lock
HOT_KEYS = ["hot-0", "hot-1", "hot-2"]


class CacheUser(HttpUser):
    wait_time = between(0.01, 0.2)

    @task(5)
    def read_hot(self):
        key = random.choice(HOT_KEYS)
        with self.client.get(f"/item/{key}", name="/item/[hot]", catch_response=True, timeout=10) as r:
            if r.status_code == 503:
                # lock wait timed out; expected under a slow backend
                r.success()
            elif r.status_code >= 500:
                r.failure(f"server {r.status_code}")

    @task(2)
    def read_cold(self):
        self.client.get(f"/item/cold-{random.randint(0, 1000)}", name="/item/[cold]", timeout=10)

    @task(1)
    def evict_hot(self):
        self.client.delete(f"/item/{random.choice(HOT_KEYS)}", name="/item/[hot]")
