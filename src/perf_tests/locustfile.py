import os
import random
import uuid

from locust import HttpUser, between, task


class PhotoGalleryUser(HttpUser):
    wait_time = between(1, 3)

    def on_start(self):
        """
        Expects a bearer token and a property that belongs to the token's account:
        LOCUST_TOKEN and LOCUST_PROPERTY_ID.
        """
        token = os.environ.get("LOCUST_TOKEN", "")
        self.property_id = os.environ.get("LOCUST_PROPERTY_ID", str(uuid.uuid4()))
        self.client.headers.update({"Authorization": f"Bearer {token}"})

    @task(5)
    def list_photos(self):
        self.client.get(f"/api/v1/properties/{self.property_id}/photos", name="/properties/[id]/photos")

    @task(1)
    def request_upload_url(self):
        payload = {
            "content_type": "image/jpeg",
            "file_size_bytes": random.randint(100_000, 5_000_000),
            "original_file_name": f"load-test-{random.randint(1, 1000)}.jpg",
        }
        self.client.post(
            f"/api/v1/properties/{self.property_id}/photos/upload-url",
            json=payload,
            name="/properties/[id]/photos/upload-url",
        )

    @task(1)
    def health_check(self):
        self.client.get("/health")
