import os
import shutil
import tempfile
import unittest
from unittest import mock

from filecompare.core.models import ContentType, PreconditionViolationError
from filecompare.services.batch import BatchOptions, CompareJob, compare_many, run_job


class TestBatch(unittest.TestCase):
    def setUp(self):
        self.test_dir = tempfile.mkdtemp(prefix="filecompare_batch_")

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def create_file(self, name, content):
        path = os.path.join(self.test_dir, name)
        with open(path, 'wb') as f:
            f.write(content)
        return path

    def test_run_job_detects_binary(self):
        left = self.create_file("a.bin", b"\x00\x01")
        right = self.create_file("b.bin", b"\x00\x02")
        result = run_job(CompareJob(left, right))
        self.assertEqual(result.content_type, ContentType.BINARY)
        self.assertEqual(result.divergence.offset, 1)

    def test_outcomes_follow_submission_order(self):
        jobs = []
        for i in range(8):
            left = self.create_file(f"left{i}.txt", f"same\n{i}\n".encode())
            right = self.create_file(f"right{i}.txt", f"same\n{i if i % 2 else 'x'}\n".encode())
            jobs.append(CompareJob(left, right))

        outcomes = compare_many(jobs, BatchOptions(max_workers=3))

        self.assertEqual([o.job for o in outcomes], jobs)
        for i, outcome in enumerate(outcomes):
            self.assertTrue(outcome.succeeded)
            self.assertEqual(outcome.result.is_equivalent, i % 2 == 1)

    def test_failed_job_does_not_stop_others(self):
        good = self.create_file("good.txt", b"a\n")
        missing = os.path.join(self.test_dir, "missing.txt")
        jobs = [
            CompareJob(good, good),
            CompareJob(good, missing),
            CompareJob(good, good, content_type=ContentType.TEXT),
        ]
        progress = []

        outcomes = compare_many(jobs, progress_callback=lambda done, total: progress.append((done, total)))

        self.assertTrue(outcomes[0].succeeded)
        self.assertFalse(outcomes[1].succeeded)
        self.assertIsInstance(outcomes[1].error, PreconditionViolationError)
        self.assertTrue(outcomes[2].result.is_equivalent)
        self.assertEqual(progress[-1], (3, 3))

    def test_unexpected_error_is_kept_on_its_outcome(self):
        good = self.create_file("good.txt", b"a\n")
        broken = self.create_file("broken.txt", b"a\n")
        jobs = [CompareJob(good, good), CompareJob(broken, good), CompareJob(good, good)]

        def flaky_run_job(job, options=None, file_io=None):
            if job.original_path == broken:
                raise RuntimeError("worker crashed")
            return run_job(job, options, file_io)

        with mock.patch("filecompare.services.batch.run_job", side_effect=flaky_run_job):
            outcomes = compare_many(jobs, BatchOptions(max_workers=2))

        self.assertEqual(len(outcomes), 3)
        self.assertTrue(outcomes[0].result.is_equivalent)
        self.assertIsInstance(outcomes[1].error, RuntimeError)
        self.assertTrue(outcomes[2].result.is_equivalent)

    def test_worker_count_must_be_positive(self):
        with self.assertRaises(PreconditionViolationError):
            compare_many([], BatchOptions(max_workers=0))


if __name__ == "__main__":
    unittest.main()
