"""Tests for gluestage.expander."""

from gluestage.compiler import GLUE_TEMP_BUCKET_REF
from gluestage.expander import expand_jobs, expand_support_files, expand_triggers
from gluestage.schemas import SupportFile

from conftest import job_entry


class TestExpandJobs:
    """Tests for expand_jobs."""

    def test_declaration_order(self, make_config):
        config = make_config(bucketDeploy="b", jobs=[job_entry("c"), job_entry("a"), job_entry("b")])
        assert [j.name for j in expand_jobs(config)] == ["c", "a", "b"]

    def test_no_jobs(self, make_config):
        assert expand_jobs(make_config()) == []

    def test_fresh_objects_each_call(self, make_config):
        config = make_config(bucketDeploy="b", jobs=[job_entry()])
        first = expand_jobs(config)[0]
        first.stage("s3://b/etl1.py")
        assert expand_jobs(config)[0].script_s3_location is None

    def test_duplicate_names_kept(self, make_config):
        config = make_config(bucketDeploy="b", jobs=[job_entry("etl1"), job_entry("etl1")])
        assert len(expand_jobs(config)) == 2

    def test_temp_dir_with_configured_bucket(self, make_config):
        config = make_config(
            bucketDeploy="b", tempDirBucket="scratch", tempDirS3Prefix="tmp/",
            jobs=[job_entry(tempDir=True)],
        )
        assert expand_jobs(config)[0].temp_dir_location == "s3://scratch/tmp/etl1"

    def test_temp_dir_references_synthesized_bucket(self, make_config):
        config = make_config(bucketDeploy="b", jobs=[job_entry(tempDir=True)])
        location = expand_jobs(config)[0].temp_dir_location
        assert location == {"Fn::Join": ["", ["s3://", {"Ref": GLUE_TEMP_BUCKET_REF}, "/etl1"]]}

    def test_no_temp_dir(self, make_config):
        config = make_config(bucketDeploy="b", tempDirBucket="scratch", jobs=[job_entry()])
        assert expand_jobs(config)[0].temp_dir_location is None


class TestExpandTriggers:
    """Tests for expand_triggers."""

    def test_declaration_order(self, make_config):
        triggers = [
            {"name": n, "type": "ON_DEMAND", "actions": [{"name": "etl1"}]}
            for n in ("z", "y")
        ]
        config = make_config(triggers=triggers)
        assert [t.name for t in expand_triggers(config)] == ["z", "y"]

    def test_no_triggers(self, make_config):
        assert expand_triggers(make_config()) == []


class TestExpandSupportFiles:
    """Tests for expand_support_files."""

    def test_none_declared(self, make_config):
        job = expand_jobs(make_config(bucketDeploy="b", jobs=[job_entry()]))[0]
        assert expand_support_files(job) == []

    def test_order_and_partial_entries(self, make_config):
        entries = [
            {"local_path": "a", "s3_bucket": "b", "s3_prefix": "p/", "execute_upload": True},
            {"local_path": "c"},
        ]
        job = expand_jobs(make_config(bucketDeploy="b", jobs=[job_entry(SupportFiles=entries)]))[0]
        assert expand_support_files(job) == [
            SupportFile("a", "b", "p/", True),
            SupportFile("c", None, None, None),
        ]
