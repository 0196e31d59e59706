"""
Object storage and maintenance script tests.

The S3 client and subprocess.run are patched; no network or child
processes are involved.
"""

import subprocess
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError

from sentra.services import storage_service
from sentra.services.storage_service import StorageError


@pytest.fixture
def spaces(app, monkeypatch):
    """Configure object storage and hand back the patched boto3 client."""
    for key, value in {
        "SPACES_ENDPOINT": "sgp1.digitaloceanspaces.com",
        "SPACES_REGION": "sgp1",
        "SPACES_KEY": "key",
        "SPACES_SECRET": "secret",
        "SPACES_BUCKET": "sentra-files",
        "SPACES_PUBLIC_BASE_URL": None,
    }.items():
        monkeypatch.setitem(app.config, key, value)

    s3 = MagicMock()
    with patch("sentra.services.storage_service.boto3.client", return_value=s3) as factory:
        s3.factory = factory
        yield s3


def _access_denied():
    return ClientError({"Error": {"Code": "AccessDenied", "Message": "Access Denied"}}, "PutObjectAcl")


class TestGenerateUploadUrl:

    def test_returns_unique_key_and_public_url(self, client, spaces):
        spaces.generate_presigned_url.return_value = "https://signed.example/put"

        resp = client.post("/api/generate-upload-url", json={"fileName": "a.png", "fileType": "image/png"})

        assert resp.status_code == 200
        assert resp.json["uploadUrl"] == "https://signed.example/put"
        assert resp.json["fileName"] != "a.png"
        assert resp.json["fileName"].endswith(".png")
        assert resp.json["fileName"] in resp.json["publicUrl"]
        assert resp.json["publicUrl"].startswith("https://sentra-files.sgp1.digitaloceanspaces.com/")

        params = spaces.generate_presigned_url.call_args.kwargs["Params"]
        assert params["ACL"] == "public-read"
        assert params["ContentType"] == "image/png"
        assert spaces.factory.call_args.kwargs["endpoint_url"] == "https://sgp1.digitaloceanspaces.com"

    def test_missing_fields(self, client, spaces):
        resp = client.post("/api/generate-upload-url", json={"fileName": "a.png"})
        assert resp.status_code == 400

    def test_not_configured(self, client, app, monkeypatch):
        monkeypatch.setitem(app.config, "SPACES_BUCKET", None)
        resp = client.post("/api/generate-upload-url", json={"fileName": "a.png", "fileType": "image/png"})
        assert resp.status_code == 500
        assert resp.json["error"] == "DigitalOcean Spaces configuration missing"


class TestFixAcl:

    def test_fix_single_file(self, client, spaces):
        resp = client.post("/api/fix-file-acl", json={"fileName": "123-abc.png"})
        assert resp.status_code == 200
        assert resp.json["success"] is True
        assert resp.json["fileUrl"].endswith("/123-abc.png")
        spaces.put_object_acl.assert_called_once_with(Bucket="sentra-files", Key="123-abc.png", ACL="public-read")

    def test_fix_single_file_failure(self, client, spaces):
        spaces.put_object_acl.side_effect = _access_denied()
        resp = client.post("/api/fix-file-acl", json={"fileName": "123-abc.png"})
        assert resp.status_code == 500
        assert resp.json["error"] == "Failed to fix file ACL"
        assert "AccessDenied" in resp.json["details"]

    def test_fix_all_counts_failures(self, client, spaces):
        spaces.get_paginator.return_value.paginate.return_value = [
            {"Contents": [{"Key": "a.png"}, {"Key": "uploads/"}]},
            {"Contents": [{"Key": "b.png"}, {"Key": "c.png"}]},
        ]
        spaces.put_object_acl.side_effect = [None, _access_denied(), None]

        resp = client.post("/api/fix-all-files")

        assert resp.status_code == 200
        assert resp.json["fixedCount"] == 2
        assert resp.json["failedCount"] == 1
        assert resp.json["totalFiles"] == 3

    def test_fix_all_empty_bucket(self, client, spaces):
        spaces.get_paginator.return_value.paginate.return_value = [{}]
        resp = client.post("/api/fix-all-files")
        assert resp.json["totalFiles"] == 0
        assert resp.json["message"] == "No files to fix ACL for"



class TestSetupPublicAccess:

    def test_reapplies_acl_when_not_public(self, app, spaces, monkeypatch):
        checks = iter([False, True])
        monkeypatch.setattr(storage_service, "_is_public", lambda url: next(checks))

        with app.test_request_context():
            result = storage_service.setup_public_access()

        assert result["success"] is True
        assert result["aclReapplied"] is True
        spaces.delete_object.assert_called_once_with(Bucket="sentra-files", Key="acl-check/public-read.txt")

    def test_acl_error_is_typed_and_object_removed(self, app, spaces, monkeypatch):
        monkeypatch.setattr(storage_service, "_is_public", lambda url: False)
        spaces.put_object_acl.side_effect = _access_denied()

        with app.test_request_context():
            with pytest.raises(StorageError, match="AccessDenied"):
                storage_service.setup_public_access()

        spaces.delete_object.assert_called_once_with(Bucket="sentra-files", Key="acl-check/public-read.txt")

    def test_cleanup_failure_does_not_mask_result(self, app, spaces, monkeypatch):
        monkeypatch.setattr(storage_service, "_is_public", lambda url: True)
        spaces.delete_object.side_effect = ClientError({"Error": {"Code": "AccessDenied"}}, "DeleteObject")

        with app.test_request_context():
            result = storage_service.setup_public_access()

        assert result == {
            "success": True,
            "publicUrl": "https://sentra-files.sgp1.digitaloceanspaces.com/acl-check/public-read.txt",
            "aclReapplied": False,
        }

class TestRunScript:

    def test_unknown_script(self, client, db_session):
        resp = client.post("/api/run-script", json={"script": "rm-rf"})
        assert resp.status_code == 400
        assert "quick-fix-files" in resp.json["allowedScripts"]

    def test_counts_parsed_from_output(self, client, db_session):
        done = subprocess.CompletedProcess(
            args=[], returncode=0, stdout="Fixed: 5\nFailed: 1\nTotal files: 6\n", stderr="",
        )
        with patch("sentra.services.script_service.subprocess.run", return_value=done) as run:
            resp = client.post("/api/run-script", json={"script": "quick-fix-files"})

        assert resp.status_code == 200
        assert resp.json["fixedCount"] == 5
        assert resp.json["failedCount"] == 1
        assert resp.json["totalFiles"] == 6
        command = run.call_args.args[0]
        assert command[-2:] == ["files", "fix-all"]

    def test_timeout(self, client, db_session):
        with patch(
            "sentra.services.script_service.subprocess.run",
            side_effect=subprocess.TimeoutExpired(cmd="flask", timeout=60),
        ):
            resp = client.post("/api/run-script", json={"script": "setup-automatic-acl"})
        assert resp.status_code == 408

    def test_nonzero_exit(self, client, db_session):
        failed = subprocess.CompletedProcess(args=[], returncode=1, stdout="", stderr="boom")
        with patch("sentra.services.script_service.subprocess.run", return_value=failed):
            resp = client.post("/api/run-script", json={"script": "fix-existing-files-acl"})
        assert resp.status_code == 500
        assert resp.json["stderr"] == "boom"
