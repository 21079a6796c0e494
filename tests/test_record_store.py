import sys
import tempfile
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from resume_tailor.core.errors import PersistenceError
from resume_tailor.schemas.records import EducationIn, ProfileIn, SkillIn, WorkExperienceIn
from resume_tailor.storage.record_store import SQLiteRecordStore


class SQLiteRecordStoreTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.store = SQLiteRecordStore(str(Path(self._tmp.name) / "records.db"))
        self.store.init_schema()

    def tearDown(self):
        self.store.close()
        self._tmp.cleanup()

    def test_profile_upsert_replaces_existing_row(self):
        self.store.upsert_profile(
            "user-1",
            ProfileIn.model_validate({"fullName": "Ada", "languages": [{"language": "English", "level": "C2"}]}),
        )
        self.store.upsert_profile("user-1", ProfileIn(full_name="Ada Lovelace", email="ada@example.com"))

        profile = self.store.fetch_profile("user-1")
        self.assertEqual(profile.full_name, "Ada Lovelace")
        self.assertEqual(profile.email, "ada@example.com")
        self.assertEqual(profile.languages, [])
        self.assertIsNone(self.store.fetch_profile("user-2"))

    def test_profile_keeps_languages_and_certifications(self):
        self.store.upsert_profile(
            "user-1",
            ProfileIn.model_validate(
                {
                    "full_name": "Ada",
                    "languages": [{"language": "German", "level": "B2"}],
                    "certifications": [{"name": "CKA", "issuer": "CNCF", "year": "2023"}],
                }
            ),
        )
        profile = self.store.fetch_profile("user-1")
        self.assertEqual(profile.languages[0].language, "German")
        self.assertEqual(profile.certifications[0].issuer, "CNCF")

    def test_unreadable_profile_json_columns_read_as_empty(self):
        self.store.upsert_profile("user-1", ProfileIn(full_name="Ada"))
        self.store._run(
            "corrupt profile",
            lambda conn: conn.execute(
                "UPDATE profiles SET languages_json = ?, certifications_json = ? WHERE id = ?",
                ("{not json", '{"name": "CKA"}', "user-1"),
            ),
        )

        profile = self.store.fetch_profile("user-1")
        self.assertEqual(profile.full_name, "Ada")
        self.assertEqual(profile.languages, [])
        self.assertEqual(profile.certifications, [])

    def test_work_experiences_are_newest_first_and_scoped_to_user(self):
        self.store.insert_work_experiences(
            "user-1",
            [
                WorkExperienceIn(company="Old Co", job_title="Junior", start_date="2015-01"),
                WorkExperienceIn(company="New Co", job_title="Senior", start_date="2021-06", is_current=True),
            ],
        )
        self.store.insert_work_experiences(
            "user-2", [WorkExperienceIn(company="Other", job_title="Dev", start_date="2019-01")]
        )

        work = self.store.fetch_work_experiences("user-1")
        self.assertEqual([item.company for item in work], ["New Co", "Old Co"])
        self.assertTrue(work[0].is_current)
        self.assertFalse(work[1].is_current)

    def test_educations_and_skills_round_trip(self):
        stored = self.store.insert_educations(
            "user-1", [EducationIn(institution="MIT", degree="MSc", start_date="2018-09", field_of_study="CS")]
        )
        self.assertTrue(stored[0]["id"])
        self.store.insert_skills("user-1", [SkillIn(name="Python", category="technical", proficiency=90)])

        self.assertEqual(self.store.fetch_educations("user-1")[0].field_of_study, "CS")
        skill = self.store.fetch_skills("user-1")[0]
        self.assertEqual(skill.category, "Technical")
        self.assertEqual(skill.proficiency, 90)

    def test_documents_are_listed_newest_first(self):
        self.store.insert_document("user-1", file_url="/files/a.txt", storage_key="user-1/1_a.txt", parsed_text="A")
        self.store.insert_document("user-1", file_url="/files/b.pdf", storage_key="user-1/2_b.pdf", parsed_text=None)

        documents = self.store.fetch_documents("user-1")
        self.assertEqual([doc.file_url for doc in documents], ["/files/b.pdf", "/files/a.txt"])
        self.assertIsNone(documents[0].parsed_text)

    def test_generated_resume_returns_identifier(self):
        resume_id = self.store.insert_generated_resume(
            "user-1", job_description="Python developer", tailored={"summary": "x", "matchScore": 80}
        )
        self.assertTrue(resume_id)

    def test_unopenable_database_raises_persistence_error(self):
        broken = SQLiteRecordStore(self._tmp.name)
        with self.assertRaises(PersistenceError):
            broken.fetch_skills("user-1")


if __name__ == "__main__":
    unittest.main()
