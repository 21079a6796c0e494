import asyncio
import unittest

from api_support import ApiHarness, auth_header


def _event_loop_running():
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True


class ManualIngestApiTests(unittest.TestCase):
    def setUp(self):
        self.harness = ApiHarness()
        self.client = self.harness.client

    def tearDown(self):
        self.harness.close()

    def test_demo_mode_echoes_payload(self):
        payload = {"profile": {"full_name": "Ada"}, "skills": [{"name": "Python", "category": "Technical"}]}
        response = self.client.post("/api/ingest/manual", json=payload)
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body["demo"])
        self.assertEqual(body["results"]["profile"], {"full_name": "Ada"})
        self.assertEqual(len(body["results"]["skills"]), 1)

    def test_all_collections_are_written(self):
        store = self.harness.enable_store()
        payload = {
            "profile": {"full_name": "Ada", "email": "ada@example.com"},
            "work_experiences": [{"company": "Acme", "job_title": "Engineer", "start_date": "2020-01"}],
            "educations": [{"institution": "MIT", "degree": "BSc", "start_date": "2014-09"}],
            "skills": [{"name": "Python", "category": "technical", "proficiency": 80}],
        }
        response = self.client.post("/api/ingest/manual", json=payload, headers=auth_header())
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertFalse(body["demo"])
        self.assertEqual(body["results"]["skills"][0]["category"], "Technical")
        self.assertEqual(store.fetch_profile("user-1").email, "ada@example.com")
        self.assertEqual(len(store.fetch_educations("user-1")), 1)

    def test_partial_failure_keeps_successful_collections(self):
        store = self.harness.enable_store()
        payload = {
            "profile": {"full_name": "Ada"},
            "work_experiences": [{"job_title": "Engineer", "start_date": "2020-01"}],
        }
        response = self.client.post("/api/ingest/manual", json=payload, headers=auth_header())
        self.assertEqual(response.status_code, 207)
        body = response.json()
        self.assertEqual(body["error"], "Partial failure during data ingestion")
        self.assertIsNotNone(body["results"]["profile"])
        self.assertEqual(body["results"]["work_experiences"], [])
        self.assertTrue(any("Work experiences" in detail for detail in body["details"]))
        self.assertEqual(store.fetch_profile("user-1").full_name, "Ada")
        self.assertEqual(store.fetch_work_experiences("user-1"), [])

    def test_malformed_collection_does_not_block_the_others(self):
        store = self.harness.enable_store()
        payload = {"profile": {"full_name": "Ada"}, "work_experiences": ["oops"], "skills": "Python"}
        response = self.client.post("/api/ingest/manual", json=payload, headers=auth_header())
        self.assertEqual(response.status_code, 207)
        body = response.json()
        self.assertEqual(body["results"]["profile"]["full_name"], "Ada")
        self.assertEqual(body["results"]["work_experiences"], [])
        self.assertTrue(any(detail.startswith("Work experiences error") for detail in body["details"]))
        self.assertTrue(any(detail.startswith("Skills error") for detail in body["details"]))
        self.assertEqual(store.fetch_profile("user-1").full_name, "Ada")

    def test_null_collections_are_skipped(self):
        store = self.harness.enable_store()
        payload = {"profile": {"full_name": "Ada"}, "work_experiences": None, "educations": None, "skills": None}
        response = self.client.post("/api/ingest/manual", json=payload, headers=auth_header())
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["results"]["work_experiences"], [])
        self.assertEqual(store.fetch_profile("user-1").full_name, "Ada")

    def test_demo_mode_tolerates_null_collections(self):
        response = self.client.post("/api/ingest/manual", json={"work_experiences": None, "skills": ["oops"]})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["results"]["work_experiences"], [])

    def test_store_calls_run_off_the_event_loop(self):
        store = self.harness.enable_store()
        store.on_loop = []
        original = store.upsert_profile

        def upsert_profile(user_id, profile):
            store.on_loop.append(_event_loop_running())
            return original(user_id, profile)

        store.upsert_profile = upsert_profile
        response = self.client.post("/api/ingest/manual", json={"profile": {"full_name": "Ada"}}, headers=auth_header())
        self.assertEqual(response.status_code, 200)
        self.assertEqual(store.on_loop, [False])

    def test_invalid_skill_category_is_reported(self):
        self.harness.enable_store()
        payload = {"skills": [{"name": "Cooking", "category": "Hobby"}]}
        response = self.client.post("/api/ingest/manual", json=payload, headers=auth_header())
        self.assertEqual(response.status_code, 207)
        self.assertTrue(response.json()["details"][0].startswith("Skills error"))

    def test_requires_token_when_store_enabled(self):
        self.harness.enable_store()
        response = self.client.post("/api/ingest/manual", json={"profile": {"full_name": "Ada"}})
        self.assertEqual(response.status_code, 401)


class DocumentIngestApiTests(unittest.TestCase):
    def setUp(self):
        self.harness = ApiHarness()
        self.client = self.harness.client

    def tearDown(self):
        self.harness.close()

    def test_missing_file_is_rejected(self):
        response = self.client.post("/api/ingest/document")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "No file provided")

    def test_disallowed_type_is_rejected(self):
        response = self.client.post(
            "/api/ingest/document",
            files={"file": ("resume.zip", b"PK\x03\x04", "application/zip")},
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("Invalid file type", response.json()["error"])

    def test_oversized_file_is_rejected(self):
        self.harness.enable_store()
        content = b"a" * (10 * 1024 * 1024 + 1)
        response = self.client.post(
            "/api/ingest/document",
            files={"file": ("resume.txt", content, "text/plain")},
            headers=auth_header(),
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "File size exceeds 10MB limit")
        self.assertEqual(self.harness.store.fetch_documents("user-1"), [])

    def test_demo_upload_is_simulated(self):
        response = self.client.post(
            "/api/ingest/document",
            files={"file": ("resume.pdf", b"%PDF-1.4", "application/pdf")},
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body["demo"])
        self.assertTrue(body["data"]["id"].startswith("demo-"))
        self.assertFalse(body["data"]["has_parsed_text"])

    def test_text_upload_is_stored_and_listed(self):
        store = self.harness.enable_store()
        response = self.client.post(
            "/api/ingest/document",
            files={"file": ("my resume.txt", b"Ada Lovelace\nPython engineer", "text/plain")},
            headers=auth_header(),
        )
        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertTrue(data["has_parsed_text"])
        self.assertTrue(data["file_url"].startswith("/files/user-1/"))
        self.assertTrue(data["file_url"].endswith("_my_resume.txt"))

        key = data["file_url"][len("/files/"):]
        self.assertTrue(self.harness.files.exists(key))
        self.assertEqual(store.fetch_documents("user-1")[0].parsed_text, "Ada Lovelace\nPython engineer")

        listing = self.client.get("/api/ingest/document", headers=auth_header())
        self.assertEqual(listing.status_code, 200)
        self.assertEqual([doc["id"] for doc in listing.json()["documents"]], [data["id"]])

    def test_document_store_calls_run_off_the_event_loop(self):
        store = self.harness.enable_store()
        calls = []
        insert, fetch = store.insert_document, store.fetch_documents

        def insert_document(*args, **kwargs):
            calls.append(("insert", _event_loop_running()))
            return insert(*args, **kwargs)

        def fetch_documents(user_id):
            calls.append(("fetch", _event_loop_running()))
            return fetch(user_id)

        store.insert_document = insert_document
        store.fetch_documents = fetch_documents
        self.client.post(
            "/api/ingest/document",
            files={"file": ("cv.txt", b"text", "text/plain")},
            headers=auth_header(),
        )
        self.client.get("/api/ingest/document", headers=auth_header())
        self.assertEqual(calls, [("insert", False), ("fetch", False)])

    def test_generic_content_type_uses_extension(self):
        response = self.client.post(
            "/api/ingest/document",
            files={"file": ("resume.docx", b"PK", "application/octet-stream")},
        )
        self.assertEqual(response.status_code, 200)


if __name__ == "__main__":
    unittest.main()
